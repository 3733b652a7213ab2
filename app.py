# app.py
"""
WSGI entry point for the training portal.
Gunicorn loads ``app:app``; running this file starts the development server.
"""

import os
import logging
from logging.handlers import SysLogHandler

from training_portal import create_app


def create_application():
    """Build the portal for the environment named in FLASK_ENV."""
    config_name = os.environ.get('FLASK_ENV', 'development')
    application = create_app(config_name)

    if config_name == 'production':
        configure_production(application)

    return application


def configure_production(application):
    """Forward errors to syslog when SYSLOG_SERVER is set and report the enrollment policy."""
    if application.config.get('SYSLOG_SERVER'):
        syslog_handler = SysLogHandler(address=application.config['SYSLOG_SERVER'])
        syslog_handler.setLevel(logging.ERROR)
        application.logger.addHandler(syslog_handler)

    application.logger.info(
        f"Enrollment policy: transitions enforced={application.config['ENFORCE_STATUS_TRANSITIONS']}, "
        f"attendance eligibility enforced={application.config['ENFORCE_ATTENDANCE_ELIGIBILITY']}"
    )


app = create_application()


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    debug = os.environ.get('FLASK_ENV') == 'development'

    app.logger.info(f"Training portal dev server on port {port} (debug={debug})")
    app.run(host='0.0.0.0', port=port, debug=debug, threaded=True)
