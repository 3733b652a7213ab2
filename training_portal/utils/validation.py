# utils/validation.py
"""
WTForms form classes used as pre-flight validation for JSON payloads.

Forms are plain ``wtforms.Form`` (no CSRF, no request binding); payloads are
fed through ``validate_payload`` which raises ``ValidationError`` with the
first failing message.
"""

from datetime import date, datetime

from werkzeug.datastructures import MultiDict
from wtforms import Form, StringField, TextAreaField, IntegerField, BooleanField, DateTimeField
from wtforms.validators import (
    DataRequired, InputRequired, Email, Length, NumberRange, Optional, Regexp, AnyOf,
    ValidationError as FieldValidationError
)

from training_portal.models.registration import EnrollmentStatus, AttendanceStatus
from training_portal.models.resource import ResourceType
from training_portal.models.training import TrainingStatus, RegistrationMethod, TargetAudience
from training_portal.utils.errors import ValidationError

DATETIME_FORMATS = ['%Y-%m-%dT%H:%M:%S.%f', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%dT%H:%M', '%Y-%m-%d']
TIME_PATTERN = r'^([01]\d|2[0-3]):[0-5]\d$'
NAME_PATTERN = r"^[a-zA-Z\s\-'.]+$"
COLOR_PATTERN = r'^#[0-9a-fA-F]{6}$'
MAX_URL_LENGTH = 2048


def strip_filter(value):
    return value.strip() if isinstance(value, str) else value


def empty_to_none(value):
    return value or None


class HttpsUrl:
    """Accept an empty value or an https:// URL of bounded length."""

    def __init__(self, max_length=MAX_URL_LENGTH):
        self.max_length = max_length

    def __call__(self, form, field):
        if not field.data:
            return
        if not field.data.startswith('https://'):
            raise FieldValidationError('URL must use HTTPS')
        if len(field.data) > self.max_length:
            raise FieldValidationError('URL is too long')


class TrainingForm(Form):
    name = StringField('Name', filters=[strip_filter], validators=[
        DataRequired(message='Name is required'),
        Length(max=200, message='Name must be less than 200 characters')
    ])
    description = TextAreaField('Description', validators=[
        Optional(),
        Length(max=5000, message='Description must be less than 5000 characters')
    ])
    short_description = StringField('Short description', validators=[
        Optional(),
        Length(max=300, message='Short description must be less than 300 characters')
    ])
    category_id = StringField('Category', validators=[DataRequired(message='Category is required')])

    date = DateTimeField('Date', format=DATETIME_FORMATS,
                         validators=[InputRequired(message='Date is required')])
    end_date = DateTimeField('End date', format=DATETIME_FORMATS, validators=[Optional()])
    time_from = StringField('Start time', filters=[empty_to_none], validators=[
        Optional(), Regexp(TIME_PATTERN, message='Start time must be HH:MM')
    ])
    time_to = StringField('End time', filters=[empty_to_none], validators=[
        Optional(), Regexp(TIME_PATTERN, message='End time must be HH:MM')
    ])
    duration = StringField('Duration', validators=[Optional(), Length(max=100)])
    status = StringField('Status', validators=[
        Optional(), AnyOf(TrainingStatus.ALL, message='Invalid training status')
    ])

    available_slots = IntegerField('Available slots', validators=[
        InputRequired(message='Available slots is required'),
        NumberRange(min=0, message='Available slots cannot be negative'),
        NumberRange(max=10000, message='Available slots must be at most 10000')
    ])
    max_registrations = IntegerField('Max registrations', validators=[
        InputRequired(message='Max registrations is required'),
        NumberRange(min=1, message='Max registrations must be at least 1'),
        NumberRange(max=10000, message='Max registrations must be at most 10000')
    ])
    is_registration_open = BooleanField('Registration open')

    registration_method = StringField('Registration method', validators=[
        Optional(), AnyOf(RegistrationMethod.ALL, message='Invalid registration method')
    ])
    external_link = StringField('External link', filters=[strip_filter, empty_to_none],
                                validators=[Optional(), HttpsUrl()])

    hero_image = StringField('Hero image', validators=[Optional(), Length(max=MAX_URL_LENGTH)])
    is_featured = BooleanField('Featured')
    is_recommended = BooleanField('Recommended')
    display_order = IntegerField('Display order', validators=[Optional()])
    location = StringField('Location', validators=[Optional(), Length(max=200)])
    speakers = StringField('Speakers', validators=[Optional(), Length(max=500)])
    target_audience = StringField('Target audience', validators=[
        Optional(), AnyOf(TargetAudience.ALL, message='Invalid target audience')
    ])

    def validate(self, extra_validators=None):
        if not super().validate(extra_validators=extra_validators):
            return False

        # Cross-field rules run only once every field is individually valid
        if self.available_slots.data > self.max_registrations.data:
            self.available_slots.errors.append('Available slots cannot exceed max registrations')
            return False
        if self.registration_method.data == RegistrationMethod.EXTERNAL and not self.external_link.data:
            self.external_link.errors.append('External link is required for external registration')
            return False
        return True


class CategoryForm(Form):
    name = StringField('Name', filters=[strip_filter], validators=[
        DataRequired(message='Name is required'),
        Length(max=100, message='Name must be less than 100 characters')
    ])
    color = StringField('Color', validators=[
        DataRequired(message='Invalid color format'),
        Regexp(COLOR_PATTERN, message='Invalid color format')
    ])


class ResourceForm(Form):
    title = StringField('Title', filters=[strip_filter], validators=[
        DataRequired(message='Title is required'),
        Length(max=200, message='Title must be less than 200 characters')
    ])
    type = StringField('Type', validators=[
        DataRequired(message='Type is required'),
        AnyOf(ResourceType.ALL, message='Invalid resource type')
    ])
    file_url = StringField('File URL', validators=[Optional(), Length(max=MAX_URL_LENGTH)])
    file_path = StringField('File path', validators=[Optional(), Length(max=512)])
    external_link = StringField('External link', filters=[strip_filter, empty_to_none],
                                validators=[Optional(), HttpsUrl()])


class RegistrationForm(Form):
    """Participant details for admin-added and self-service enrollments."""

    participant_name = StringField('Name', filters=[strip_filter], validators=[
        DataRequired(message='Name is required'),
        Length(max=200, message='Name must be less than 200 characters'),
        Regexp(NAME_PATTERN, message='Name contains invalid characters')
    ])
    participant_email = StringField('Email', filters=[strip_filter], validators=[
        DataRequired(message='Invalid email address'),
        Email(message='Invalid email address'),
        Length(max=255, message='Email must be less than 255 characters')
    ])
    participant_phone = StringField('Phone', filters=[strip_filter, empty_to_none],
                                    validators=[Optional(), Length(max=30)])
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=5000)])


class RegistrationUpdateForm(RegistrationForm):
    status = StringField('Status', validators=[
        Optional(), AnyOf(EnrollmentStatus.ALL, message='Invalid enrollment status')
    ])
    attendance_status = StringField('Attendance', validators=[
        Optional(), AnyOf(AttendanceStatus.ALL, message='Invalid attendance status')
    ])


def _to_formdata(payload):
    formdata = MultiDict()
    for key, value in payload.items():
        if value is None or isinstance(value, (list, dict)):
            continue
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        elif isinstance(value, bool):
            value = 'true' if value else 'false'
        elif not isinstance(value, str):
            value = str(value)
        formdata.add(key, value)
    return formdata


def first_error(form):
    for field in form:
        if field.errors:
            return field.errors[0]
    return 'Validation failed'


def validate_payload(form_class, payload):
    """
    Validate a payload against form_class.

    Returns the cleaned values of the form fields present in the payload.
    Raises ValidationError on the first failure.
    """
    payload = payload or {}
    form = form_class(formdata=_to_formdata(payload))
    if not form.validate():
        raise ValidationError(first_error(form), dict(form.errors))

    return {
        name: None if payload[name] is None else field.data
        for name, field in form._fields.items() if name in payload
    }
