"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    logs.py                                                                                              *
*        Project: hdrprep                                                                                              *
*        Version: 0.1.0                                                                                                *
*        Created: 2026-10-18                                                                                           *
*        Author:  Jess Mann                                                                                            *
*        Email:   jess.a.mann@gmail.com                                                                                *
*        Copyright (c) 2026 Jess Mann                                                                                  *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    LAST MODIFIED:                                                                                                    *
*                                                                                                                      *
*        2026-10-18     By Jess Mann                                                                                   *
*                                                                                                                      *
*********************************************************************************************************************"""
from __future__ import annotations
import logging
import colorlog

LOG_COLORS = {
	"DEBUG": "green",
	"INFO": "blue",
	"WARNING": "yellow",
	"ERROR": "red",
	"CRITICAL": "red,bg_white",
}

# Third party loggers that are too chatty below WARNING
QUIET_LOGGERS = ('PIL', 'imageio', 'matplotlib')


def setup_logging(verbose : bool = False) -> logging.Logger:
	"""
	Configure colored console logging for the command line tools.

	Library code never calls this; it only obtains module loggers.

	Args:
		verbose (bool): Log DEBUG messages when True, INFO otherwise.

	Returns:
		logging.Logger: The configured root logger.
	"""
	handler = colorlog.StreamHandler()
	handler.setFormatter(
		colorlog.ColoredFormatter(
			"(%(log_color)s%(levelname)s%(reset)s) %(message)s",
			log_colors=LOG_COLORS,
		)
	)

	root_logger = logging.getLogger()
	root_logger.handlers = []  # Clear existing handlers
	root_logger.addHandler(handler)
	root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

	for name in QUIET_LOGGERS:
		logging.getLogger(name).setLevel(logging.WARNING)

	return root_logger
