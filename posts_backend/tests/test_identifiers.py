import re
import time

import pytest

from src.api.errors import InvalidIdentifierError
from src.api.identifiers import IDENTIFIER_LENGTH, check_identifier, generate_identifier


class TestCheckIdentifier:
    def test_accepts_hex_and_normalizes_case(self):
        assert check_identifier("0123456789ABCDEFabcdef01") == "0123456789abcdefabcdef01"

    @pytest.mark.parametrize(
        "raw",
        ["", "abc", "g" * 24, "0" * 23, "0" * 25, " " + "0" * 23, "0" * 24 + "\n", None, 123],
    )
    def test_rejects_malformed(self, raw):
        with pytest.raises(InvalidIdentifierError) as exc_info:
            check_identifier(raw)
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == raw


class TestGenerateIdentifier:
    def test_format(self):
        ident = generate_identifier()
        assert len(ident) == IDENTIFIER_LENGTH
        assert re.fullmatch(r"[0-9a-f]{24}", ident)
        assert check_identifier(ident) == ident

    def test_unique(self):
        ids = [generate_identifier() for _ in range(1000)]
        assert len(set(ids)) == 1000

    def test_strictly_increasing(self):
        ids = [generate_identifier() for _ in range(2000)]
        assert all(a < b for a, b in zip(ids, ids[1:]))

    def test_timestamp_prefix(self):
        before = int(time.time())
        ident = generate_identifier()
        after = int(time.time())
        assert before <= int(ident[:8], 16) <= after

    def test_process_part_is_stable(self):
        a, b = generate_identifier(), generate_identifier()
        assert a[8:18] == b[8:18]
