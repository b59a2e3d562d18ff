from typing import NamedTuple, Iterable, Tuple, Union


class Control(NamedTuple):
    line: int
    polarity: bool = True     # False: the gate fires when the line is |0>

    def __repr__(self):
        return f"{'' if self.polarity else '-'}{self.line}"


def as_controls(controls: Iterable[Union[int, Control]]) -> Tuple[Control, ...]:
    """Accept bare line indices next to Control entries."""
    return tuple(c if isinstance(c, Control) else Control(int(c)) for c in controls)
