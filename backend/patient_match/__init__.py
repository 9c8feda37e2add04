"""patient-match: IDI Patient/$match minimum-criteria service."""
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
