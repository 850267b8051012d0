from dataclasses import dataclass

@dataclass(frozen=True, slots=True)
class BoardPosition:
    row: int
    col: int


@dataclass(slots=True, eq=False)
class Token:
    """Per-cell gem. Position is identity; only the type mutates.

    type_name holds either a palette gem or the cleared sentinel. The token
    itself lives for the whole game; clears, swaps and refills rewrite type_name.
    """
    position: BoardPosition
    type_name: str

    def __setattr__(self, name, value):
        if name == "position" and hasattr(self, "position"):
            raise AttributeError("Token position is fixed once created")
        object.__setattr__(self, name, value)

    @property
    def row(self) -> int:
        return self.position.row

    @property
    def col(self) -> int:
        return self.position.col

    def set_type(self, type_name: str) -> None:
        self.type_name = type_name

    def __repr__(self) -> str:
        return f"Token({self.row}, {self.col}, {self.type_name!r})"
