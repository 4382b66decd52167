"""Tests for the state record parser."""

import pytest

from jiminy.core.errors import ParseError
from jiminy.core.record_parser import parse_records

VOTE_STATE = """
    pub struct Platform {
        pub authority: [u8; 32],
        pub fee: [u8; 2],
        pub vault_bump: u8,
    }

    struct Position {
        amount: u64,
        side: u8,
        bump: u8,
    }
"""


class TestParseRecords:
    def test_finds_every_block(self) -> None:
        records = parse_records(VOTE_STATE)

        assert [record.name for record in records] == ["Platform", "Position"]

    def test_fields_in_order(self) -> None:
        platform = parse_records(VOTE_STATE)[0]

        assert [(f.name, f.type_token) for f in platform.fields] == [
            ("authority", "[u8; 32]"),
            ("fee", "[u8; 2]"),
            ("vault_bump", "u8"),
        ]

    def test_empty_record_is_dropped(self) -> None:
        records = parse_records("struct Empty {\n}\nstruct Full {\n x: u8,\n}")

        assert [record.name for record in records] == ["Full"]

    def test_unclosed_block_is_dropped(self) -> None:
        records = parse_records("struct Ok {\n x: u8,\n}\nstruct Broken {\n y: u8,\n")

        assert [record.name for record in records] == ["Ok"]

    def test_bad_field_line_drops_record(self) -> None:
        records = parse_records("struct Bad {\n x u8,\n}\nstruct Good {\n y: u16,\n}")

        assert [record.name for record in records] == ["Good"]

    def test_duplicate_field_drops_record(self) -> None:
        assert parse_records("struct Dup {\n x: u8,\n x: u16,\n}") == []

    def test_strict_mode_raises(self) -> None:
        with pytest.raises(ParseError, match="declares no fields"):
            parse_records("struct Empty {}", strict=True)

    def test_no_blocks(self) -> None:
        assert parse_records("nothing here") == []
