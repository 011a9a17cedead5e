"""Unit tests for cadence_cli.utils.exit_codes."""

from __future__ import annotations

import pytest

from cadence_cli.utils.exit_codes import (
    ERROR_GENERAL,
    ERROR_INVALID_ARGS,
    ERROR_INVALID_STATE,
    ERROR_NOT_FOUND,
    SUCCESS,
    get_exit_code_description,
    get_exit_code_name,
)


class TestExitCodeConstants:
    def test_values(self):
        assert SUCCESS == 0
        assert ERROR_GENERAL == 1
        assert ERROR_INVALID_ARGS == 2
        assert ERROR_NOT_FOUND == 5
        assert ERROR_INVALID_STATE == 7

    def test_all_constants_are_unique(self):
        codes = [SUCCESS, ERROR_GENERAL, ERROR_INVALID_ARGS, ERROR_NOT_FOUND, ERROR_INVALID_STATE]
        assert len(codes) == len(set(codes))


class TestHelpers:
    @pytest.mark.parametrize(
        "code, name",
        [
            (SUCCESS, "SUCCESS"),
            (ERROR_NOT_FOUND, "ERROR_NOT_FOUND"),
            (ERROR_INVALID_STATE, "ERROR_INVALID_STATE"),
        ],
    )
    def test_names(self, code, name):
        assert get_exit_code_name(code) == name

    def test_unknown_name(self):
        assert get_exit_code_name(99) == "UNKNOWN(99)"

    def test_descriptions(self):
        assert get_exit_code_description(ERROR_INVALID_ARGS) == "Invalid arguments or configuration"
        assert get_exit_code_description(-1) == "Unknown error"
