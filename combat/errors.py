from typing import Optional

class CombatError(Exception):
    """Base class for combat simulation failures."""

class MapParseError(CombatError, ValueError):
    """Map text is not a rectangular grid of known characters."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            where = f"line {line}" if column is None else f"line {line}, column {column}"
            message = f"{where}: {message}"
        super().__init__(message)

class NoSolutionError(CombatError):
    """No elf attack power up to the ceiling wins without elf losses."""

    def __init__(self, ceiling: int):
        self.ceiling = ceiling
        super().__init__(f"no elf attack power up to {ceiling} wins without losses")

class StalemateError(CombatError):
    """Combat did not end within the configured number of rounds."""

    def __init__(self, max_rounds: int):
        self.max_rounds = max_rounds
        super().__init__(f"combat did not end within {max_rounds} rounds")
