# empft is an open source Python based power, force and torque module for BEM solutions.
# Copyright (C) 2025  Robert Fennis.

# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU General Public License
# as published by the Free Software Foundation; either version 2
# of the License, or (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program; if not, see
# <https://www.gnu.org/licenses/>.


from loguru import logger
import sys
from typing import Literal
from pathlib import Path
import os

############################################################
#                          FORMATS                         #
############################################################

TRACE_FORMAT = (
    "{time:ddd YY/MM/DD HH:mm:ss.SSSS} {level:<7} {thread.id:<15} {line:>4}: "
    "{message}"
)

DEBUG_FORMAT = (
    "<green>{elapsed}</green>  <level>{level:<7}</level> {thread.name:<12}: "
    "<level>{message}</level>"
)
INFO_FORMAT = (
    "<green>{elapsed}</green>  <level>{level:<7}</level>: "
    "<level>{message}</level>"
)
WARNING_FORMAT = (
    "<green>{elapsed}</green>  <level>{level:<7}</level>: "
    "<level>{message}</level>"
)
ERROR_FORMAT = (
    "<green>{elapsed}</green>  <level>{level:<7}</level> {name}:{line}: "
    "<level>{message}</level>"
)
FORMAT_DICT = {
    'TRACE': TRACE_FORMAT,
    'DEBUG': DEBUG_FORMAT,
    'INFO': INFO_FORMAT,
    'WARNING': WARNING_FORMAT,
    'ERROR': ERROR_FORMAT,
}

LLTYPE = Literal['TRACE','DEBUG','INFO','WARNING','ERROR']


############################################################
#                      LOG CONTROLLER                     #
############################################################

class LogController:
    """Owns the loguru sinks used by empft.

    The standard output sink level is seeded from the EMPFT_STD_LOGLEVEL environment variable.
    """
    def __init__(self):
        self.std_handlers: list[int] = []
        self.file_handlers: list[int] = []
        self.level: str = 'INFO'
        self.file_level: str = 'INFO'

    def set_default(self):
        value = os.getenv("EMPFT_STD_LOGLEVEL", default="INFO")
        self.set_std_loglevel(value)

    def set_std_loglevel(self, loglevel: LLTYPE | str):
        loglevel = loglevel.upper()
        for handle_id in self.std_handlers:
            logger.remove(handle_id)
        self.std_handlers = []
        handle_id = logger.add(sys.stderr,
                               level=loglevel,
                               format=FORMAT_DICT.get(loglevel, INFO_FORMAT))
        self.std_handlers.append(handle_id)
        self.level = loglevel
        os.environ["EMPFT_STD_LOGLEVEL"] = loglevel

    def set_write_file(self, path: Path | str, loglevel: LLTYPE | str = 'TRACE'):
        """Writes all log messages at or above loglevel to path/logging.log"""
        path = Path(path)
        handler_id = logger.add(str(path / 'logging.log'), mode='w', level=loglevel,
                                format=FORMAT_DICT.get(loglevel, INFO_FORMAT),
                                colorize=False, backtrace=True, diagnose=True)
        self.file_handlers.append(handler_id)
        self.file_level = loglevel
        os.environ["EMPFT_FILE_LOGLEVEL"] = loglevel

    def remove_write_files(self):
        for handler_id in self.file_handlers:
            logger.remove(handler_id)
        self.file_handlers = []

LOG_CONTROLLER = LogController()
