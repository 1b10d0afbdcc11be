"""Unit tests for work type material policies"""

import pytest

from src.app.services.material_policy import RollSelection, load_material_policies


class TestLoadMaterialPolicies:

    def test_loads_configured_work_types(self):
        policies = load_material_policies(
            {
                "DTF": {"material_type": "DTF", "roll_selection": "fifo"},
                "SUBLIMATION": {"material_type": "SUBLIM", "roll_selection": "manual"},
            }
        )

        assert policies["DTF"].material_type == "DTF"
        assert policies["DTF"].requires_roll_number is False
        assert policies["SUBLIMATION"].roll_selection == RollSelection.MANUAL
        assert policies["SUBLIMATION"].requires_roll_number is True

    def test_roll_selection_defaults_to_fifo(self):
        policies = load_material_policies({"VINYL": {"material_type": "VINYL"}})
        assert policies["VINYL"].roll_selection == RollSelection.FIFO

    def test_empty_config(self):
        assert load_material_policies(None) == {}

    def test_missing_material_type(self):
        with pytest.raises(ValueError, match="material_type"):
            load_material_policies({"DTF": {"roll_selection": "fifo"}})

    def test_unknown_roll_selection(self):
        with pytest.raises(ValueError, match="roll_selection"):
            load_material_policies({"DTF": {"material_type": "DTF", "roll_selection": "random"}})
