from typing import Callable, Optional
from .entities import Combination, Describable, Taggable

def find_combination(
    a: Taggable,
    b: Taggable,
    is_available: Callable[[Describable], bool],
    check_two_way: bool = True,
) -> Optional[Combination]:
    """
    Returns the first available combination declared on 'a' targeting 'b'.
    Otherwise looks at combinations declared on 'b' targeting 'a' (once).
    """
    if b.key:
        combination = next(
            (
                combination
                for combination in a.combinations
                if combination.target == b.key and is_available(combination)
            ),
            None
        )
        if combination is not None:
            return combination

    if check_two_way:
        return find_combination(b, a, is_available, check_two_way=False)

    return None
