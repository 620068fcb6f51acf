"""
ShopDesk Core
=============

Core utilities and shared functionality for ShopDesk modules.
"""

from .config import Config, get_config
from .database import db, init_database
from .logging_service import LoggingService, logger, db_log
from .notifications import Notifier

__all__ = ['Config', 'get_config', 'db', 'init_database', 'LoggingService', 'logger', 'db_log', 'Notifier']
