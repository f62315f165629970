import re
from enum import Flag, auto


class OpenMode(Flag):
    """
    Open-mode configuration handed verbatim to a handle's ``open``.

    READ enables extraction, WRITE enables insertion, APPEND positions every
    write at end-of-file and TRUNCATE discards existing content on open.
    """

    READ = auto()
    WRITE = auto()
    APPEND = auto()
    TRUNCATE = auto()

    @classmethod
    def parse(cls, text: str) -> "OpenMode":
        """
        Parse names such as ``"read|write"`` or ``"Append"``.

        Names may be separated by ``|``, ``,``, ``+`` or whitespace.

        Raises:
            ValueError: If the text is empty or names an unknown option.
        """
        names = [name for name in re.split(r"[|,+\s]+", text.strip()) if name]
        if not names:
            raise ValueError("Open mode must name at least one of read, write, append, truncate")

        mode = cls(0)
        for name in names:
            try:
                mode |= cls[name.upper()]
            except KeyError:
                raise ValueError(f"Unknown open mode option: {name!r}") from None
        return mode

    def to_python_mode(self) -> str:
        """
        Map this mode onto a builtin ``open()`` mode string.

        Raises:
            ValueError: If the combination has no builtin equivalent.
        """
        cls = type(self)
        read = cls.READ in self
        write = cls.WRITE in self
        append = cls.APPEND in self
        truncate = cls.TRUNCATE in self

        if truncate and append:
            raise ValueError("TRUNCATE cannot be combined with APPEND")
        if truncate and not write:
            raise ValueError("TRUNCATE requires WRITE")

        if append:
            return "a+" if read else "a"
        if read and write:
            return "w+" if truncate else "r+"
        if write:
            return "w"
        if read:
            return "r"
        raise ValueError("Open mode must include READ, WRITE or APPEND")

    def __str__(self) -> str:
        return "|".join(member.name.lower() for member in type(self) if member in self and member.name)
