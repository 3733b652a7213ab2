# utils/export_data.py
from datetime import datetime
from io import BytesIO, StringIO

import pandas as pd

from training_portal.services.enrollment_rules import ENROLLMENT_STATUS_LABELS, ATTENDANCE_STATUS_LABELS
from training_portal.utils.dates import format_date

EXPORT_COLUMNS = [
    'Participant Name',
    'Email',
    'Phone',
    'Training Name',
    'Category',
    'Training Date',
    'Registered At',
    'Status',
    'Attendance',
    'Notes',
]

EXPORT_FORMATS = ('csv', 'xlsx')

MIME_TYPES = {
    'csv': 'text/csv',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
}


def prepare_enrollment_export_rows(registrations, trainings, categories):
    """
    Flatten registrations into export rows with columns:
    - Participant Name, Email, Phone
    - Training Name, Category, Training Date (yyyy-MM-dd)
    - Registered At (yyyy-MM-dd HH:mm), Status, Attendance, Notes

    Unknown trainings and categories are reported as 'Unknown'.
    """
    trainings_by_id = {t['id']: t for t in trainings}
    categories_by_id = {c['id']: c for c in categories}

    rows = []
    for registration in registrations:
        training = trainings_by_id.get(registration.get('training_id'))
        category = categories_by_id.get(training.get('category_id')) if training else None

        rows.append({
            'Participant Name': registration.get('participant_name') or '',
            'Email': registration.get('participant_email') or '',
            'Phone': registration.get('participant_phone') or '',
            'Training Name': training['name'] if training else 'Unknown',
            'Category': category['name'] if category else 'Unknown',
            'Training Date': format_date(training.get('date')) if training else '',
            'Registered At': format_date(registration.get('registered_at'), '%Y-%m-%d %H:%M'),
            'Status': ENROLLMENT_STATUS_LABELS.get(registration.get('status'), registration.get('status') or ''),
            'Attendance': ATTENDANCE_STATUS_LABELS.get(registration.get('attendance_status'),
                                                       registration.get('attendance_status') or ''),
            'Notes': registration.get('notes') or '',
        })
    return rows


def export_filename(now=None):
    return f"enrollments_{(now or datetime.now()).strftime('%Y-%m-%d_%H%M')}"


def render_export(rows, fmt='xlsx', now=None):
    """
    Render export rows to CSV or Excel.

    Returns:
        tuple: (file_bytes, filename, mimetype)
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}")
    if not rows:
        raise ValueError('No data to export')

    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    filename = f"{export_filename(now)}.{fmt}"

    if fmt == 'csv':
        buffer = StringIO()
        df.to_csv(buffer, index=False)
        return buffer.getvalue().encode('utf-8'), filename, MIME_TYPES[fmt]

    # Create Excel file in memory
    output = BytesIO()
    with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
        df.to_excel(writer, sheet_name='Enrollments', index=False)

        # Auto-size columns to the longest value
        worksheet = writer.sheets['Enrollments']
        for i, col in enumerate(df.columns):
            max_len = max(df[col].astype(str).apply(len).max(), len(col)) + 2
            worksheet.set_column(i, i, max_len)

    output.seek(0)
    return output.getvalue(), filename, MIME_TYPES[fmt]
