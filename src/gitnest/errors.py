"""Domain errors raised by the service, storage and git layers.

Route handlers translate these into flash messages, 404s or opaque 500s.
"""

from __future__ import annotations


class GitnestError(Exception):
    pass


class InvalidNameError(GitnestError):
    """Base for name validation failures; carries the rejected name."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name


class NameReservedError(InvalidNameError):
    def __str__(self) -> str:
        return f"name is reserved [name: {self.name}]"


class NamePatternNotAllowedError(InvalidNameError):
    def __str__(self) -> str:
        return f"name pattern is not allowed [pattern: {self.name}]"


class NameCharsNotAllowedError(InvalidNameError):
    def __str__(self) -> str:
        return f"name is invalid [{self.name}]: must be valid alpha or numeric or dash(-_) or dot characters"


class NameEmptyError(InvalidNameError):
    def __str__(self) -> str:
        return "name is empty"


class UserAlreadyExistError(InvalidNameError):
    def __str__(self) -> str:
        return f"user already exists [name: {self.name}]"


class EmailAlreadyUsedError(GitnestError):
    def __init__(self, email: str) -> None:
        super().__init__(email)
        self.email = email

    def __str__(self) -> str:
        return f"e-mail already in use [email: {self.email}]"


class NotLocalUserError(GitnestError):
    pass


class AvatarTooBigError(GitnestError):
    pass


class AvatarNotImageError(GitnestError):
    pass


class GitObjectNotFoundError(GitnestError):
    """A ref, tree entry or object does not exist in the repository."""

    def __init__(self, what: str) -> None:
        super().__init__(what)
        self.what = what

    def __str__(self) -> str:
        return f"object does not exist [{self.what}]"


class ObjectNotExistError(GitnestError):
    """A storage object is missing."""

    def __init__(self, path: str) -> None:
        super().__init__(path)
        self.path = path

    def __str__(self) -> str:
        return f"storage object does not exist [path: {self.path}]"


class ServeDirectUnsupportedError(GitnestError):
    pass


class RepoAlreadyExistError(GitnestError):
    def __init__(self, owner_name: str, name: str) -> None:
        super().__init__(owner_name, name)
        self.owner_name = owner_name
        self.name = name

    def __str__(self) -> str:
        return f"repository already exists [uname: {self.owner_name}, name: {self.name}]"


class RepoDirNotExistError(GitnestError):
    def __init__(self, path: str) -> None:
        super().__init__(path)
        self.path = path

    def __str__(self) -> str:
        return f"repository directory does not exist [path: {self.path}]"
