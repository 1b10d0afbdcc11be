"""Work type material policies

Which work types consume roll material, which material type they draw
from and how the roll is chosen. Loaded from the WORK_TYPES config
mapping; work types without a policy consume nothing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping


class RollSelection(str, Enum):
    FIFO = "fifo"
    MANUAL = "manual"


@dataclass(frozen=True)
class MaterialPolicy:
    work_type: str
    material_type: str
    roll_selection: RollSelection = RollSelection.FIFO

    @property
    def requires_roll_number(self) -> bool:
        return self.roll_selection == RollSelection.MANUAL


def load_material_policies(work_types: Mapping[str, Mapping[str, Any]]) -> Dict[str, MaterialPolicy]:
    """
    Build policies from the WORK_TYPES config mapping

    Raises:
        ValueError: If an entry has no material_type or an unknown roll_selection
    """
    policies = {}
    for work_type, entry in (work_types or {}).items():
        material_type = entry.get("material_type")
        if not material_type:
            raise ValueError(f"WORK_TYPES[{work_type}] is missing material_type")
        try:
            selection = RollSelection(entry.get("roll_selection", RollSelection.FIFO.value))
        except ValueError as e:
            raise ValueError(
                f"WORK_TYPES[{work_type}] has unknown roll_selection {entry.get('roll_selection')!r}"
            ) from e
        policies[work_type] = MaterialPolicy(
            work_type=work_type,
            material_type=material_type,
            roll_selection=selection,
        )
    return policies
