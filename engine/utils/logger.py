"""
Logging system for featuregen.
"""
import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional

from core.diagnostics import Diagnostic, Severity

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

class Logger:

    def __init__(self, debug_mode: bool = False, level: str = "info"):
        """
        Initialize the logger using standard logging module.
        """
        self.debug_mode = debug_mode or (os.environ.get("DEBUG_LOGGING", "false").lower() == "true")

        self._logger = logging.getLogger("featuregen")
        self._logger.setLevel(logging.DEBUG if self.debug_mode else _LEVELS.get(level.lower(), logging.INFO))

        if not self._logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter('%(message)s')
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    def log_info(self,
                 message: str,
                 component: str,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """
        Log information to stderr.
        """
        self._log("INFO", component, {
            "message": message,
            "context": context
        })

    def log_debug(self,
                  message: str,
                  component: str,
                  context: Optional[Dict[str, Any]] = None) -> None:
        """
        Log debug details; dropped unless debug mode is on.
        """
        if not self.debug_mode:
            return

        self._log("DEBUG", component, {
            "message": message,
            "context": context
        })

    def log_warning(self,
                    message: str,
                    component: str,
                    context: Optional[Dict[str, Any]] = None) -> None:
        self._log("WARNING", component, {
            "message": message,
            "context": context
        })

    def log_error(self,
                 error_msg: str,
                 component: str,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """
        Log an error to stderr.
        """
        self._log("ERROR", component, {
            "error": error_msg,
            "context": context
        })

    def log_diagnostic(self, diagnostic: Diagnostic, component: str) -> None:
        """
        Log a generation diagnostic at the level matching its severity.
        """
        context = {"declaration": diagnostic.declaration, "source": diagnostic.source}
        if diagnostic.severity == Severity.ERROR:
            self.log_error(diagnostic.message, component, context)
        else:
            self.log_warning(diagnostic.message, component, context)

    def _log(self, level: str, component: str, data: Dict[str, Any]) -> None:
        """Write a structured JSON log line using standard logger."""
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "component": component,
            **data
        }
        json_msg = json.dumps(log_entry, ensure_ascii=False, default=str)

        if level == "ERROR":
            self._logger.error(json_msg)
        elif level == "WARNING":
            self._logger.warning(json_msg)
        elif level == "DEBUG":
            self._logger.debug(json_msg)
        else:
            self._logger.info(json_msg)
