"""
Centralized logging service for ShopDesk.
Provides structured logging with database storage and easy integration.
"""

import json
import logging
import traceback
from datetime import datetime, timedelta
from flask import request, current_app, has_request_context, has_app_context
from .database import db

_console = logging.getLogger('shopdesk')


class AppLog(db.Model):
    __tablename__ = 'app_logs'
    __table_args__ = (
        db.Index('idx_logs_timestamp', 'timestamp'),
        db.Index('idx_logs_level', 'level'),
        db.Index('idx_logs_source', 'source'),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    timestamp = db.Column(db.String(32), nullable=False)
    level = db.Column(db.String(16), nullable=False)
    source = db.Column(db.String(64), nullable=False)
    message = db.Column(db.Text, nullable=False)
    details = db.Column(db.Text)
    ip_address = db.Column(db.String(64))
    user_agent = db.Column(db.Text)
    request_path = db.Column(db.Text)


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def _can_persist():
        """True when an app context with a bound database is active"""
        return has_app_context() and 'sqlalchemy' in current_app.extensions

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None

        try:
            ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
            if ip_address and ',' in ip_address:
                ip_address = ip_address.split(',')[0].strip()

            user_agent = request.headers.get('User-Agent', '')
            request_path = request.path

            return ip_address, user_agent, request_path
        except Exception:
            return None, None, None

    @staticmethod
    def log(level, source, message, details=None):
        """
        Log a message to the database

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (catalog, product_form, product_list, etc.)
            message (str): Main log message
            details (str/dict): Additional details (will be JSON-encoded if dict)
        """
        level = level.upper()
        if isinstance(details, dict):
            details = json.dumps(details, indent=2, default=str)

        if not LoggingService._can_persist():
            # Outside a configured app (e.g. a script driving the editor) there is nowhere to persist
            _console.log(getattr(logging, level, logging.INFO), "[%s] %s", source, message)
            return

        try:
            ip_address, user_agent, request_path = LoggingService._get_request_context()
            entry = AppLog(
                timestamp=datetime.now().isoformat(),
                level=level,
                source=source,
                message=message,
                details=details,
                ip_address=ip_address,
                user_agent=user_agent,
                request_path=request_path,
            )
            db.session.add(entry)
            db.session.commit()

        except Exception as e:
            db.session.rollback()
            # Fallback to console logging if database fails
            _console.log(getattr(logging, level, logging.INFO), "[%s] %s", source, message)
            if details:
                _console.info("Details: %s", details)
            _console.warning("Logging service error: %s", e)

    @staticmethod
    def debug(source, message, details=None):
        """Log debug message"""
        LoggingService.log('DEBUG', source, message, details)

    @staticmethod
    def info(source, message, details=None):
        """Log info message"""
        LoggingService.log('INFO', source, message, details)

    @staticmethod
    def warning(source, message, details=None):
        """Log warning message"""
        LoggingService.log('WARNING', source, message, details)

    @staticmethod
    def error(source, message, details=None):
        """Log error message"""
        LoggingService.log('ERROR', source, message, details)

    @staticmethod
    def log_api_call(source, endpoint, method='GET', status_code=200, details=None):
        """Log API calls"""
        message = f"API {method} {endpoint} - Status: {status_code}"
        level = 'INFO' if 200 <= status_code < 400 else 'WARNING' if status_code < 500 else 'ERROR'
        LoggingService.log(level, source, message, details)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def recent(limit=50, source=None):
        """Most recent log entries, newest first"""
        query = AppLog.query
        if source:
            query = query.filter_by(source=source)
        return query.order_by(AppLog.id.desc()).limit(limit).all()

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Clean up old log entries"""
        try:
            cutoff_iso = (datetime.now() - timedelta(days=days_to_keep)).isoformat()
            deleted_count = AppLog.query.filter(AppLog.timestamp < cutoff_iso).delete()
            db.session.commit()

            LoggingService.info('system', f"Cleaned up {deleted_count} old log entries")
            return deleted_count

        except Exception as e:
            db.session.rollback()
            LoggingService.error('system', f"Failed to cleanup old logs: {e}")
            return 0


def db_log(level, source, message, details=None):
    """Shortcut used by modules to write to the persisted log"""
    LoggingService.log(level, source, message, details)


# Convenience instance for easy importing
logger = LoggingService()
