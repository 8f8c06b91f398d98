import logging
from typing import List, Optional

from .directory import Directory
from .exceptions import InvalidArgumentException


logger = logging.getLogger(__name__)


class Metadata(object):
    '''Container of the directories extracted from a file, in the order
    they have been discovered.'''

    def __init__(self):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self._directories: List[Directory] = []

    def __repr__(self):
        return f'<{self.__class__.__name__}({self._directories!r})>'

    def __str__(self):
        count = len(self._directories)
        return 'Metadata (%d %s)' % (count, 'directory' if count == 1 else 'directories')

    def __iter__(self):
        return iter(list(self._directories))

    def add_directory(self, directory: Directory) -> None:
        if not isinstance(directory, Directory):
            raise InvalidArgumentException(f'\'{directory!r}\' is not a Directory')

        if any(_ is directory for _ in self._directories):
            self.logger.debug(f'directory {directory} already present, ignoring')
            return

        self.logger.debug(f'adding directory {directory}')
        self._directories.append(directory)

    @property
    def directories(self) -> List[Directory]:
        return list(self._directories)

    @property
    def directory_count(self) -> int:
        return len(self._directories)

    def get_directories_of_type(self, cls) -> List[Directory]:
        return [_ for _ in self._directories if isinstance(_, cls)]

    def get_first_directory_of_type(self, cls) -> Optional[Directory]:
        for directory in self._directories:
            if isinstance(directory, cls):
                return directory

        return None

    def contains_directory_of_type(self, cls) -> bool:
        return self.get_first_directory_of_type(cls) is not None

    def has_errors(self) -> bool:
        return any(_.has_errors() for _ in self._directories)
