"""Tests for fixed-size type token layouts."""

import pytest

from jiminy.core.errors import UnknownTypeError
from jiminy.core.type_tokens import is_known_token, layout_of, normalize_token, size_of


class TestLayouts:
    @pytest.mark.parametrize(
        ("token", "size"),
        [
            ("u8", 1),
            ("bool", 1),
            ("i16", 2),
            ("u32", 4),
            ("u64", 8),
            ("f64", 8),
            ("u128", 16),
            ("Pubkey", 32),
            ("[u8; 32]", 32),
            ("[u8;8]", 8),
            ("[u16; 3]", 6),
            ("[[u8; 2]; 3]", 6),
        ],
    )
    def test_sizes(self, token: str, size: int) -> None:
        assert size_of(token) == size

    def test_unknown_token(self) -> None:
        with pytest.raises(UnknownTypeError):
            layout_of("String")
        assert not is_known_token("Vec<u8>")
        assert is_known_token("[u8; 4]")

    def test_normalize_collapses_spacing(self) -> None:
        assert normalize_token("[ u8 ;8 ]") == "[u8; 8]"
        assert normalize_token("[u8;8]") == normalize_token("[u8; 8]")


class TestEncodeDecode:
    def test_little_endian_integers(self) -> None:
        layout = layout_of("u64")

        assert layout.encode(1) == b"\x01" + bytes(7)
        assert layout.decode(b"\x00\x01" + bytes(6)) == 256

    def test_signed(self) -> None:
        layout = layout_of("i32")

        assert layout.decode(layout.encode(-5)) == -5
        assert layout.encode(-1) == b"\xff\xff\xff\xff"

    def test_bool(self) -> None:
        layout = layout_of("bool")

        assert layout.decode(b"\x02") is True
        assert layout.encode(False) == b"\x00"

    def test_byte_arrays_decode_to_bytes(self) -> None:
        layout = layout_of("[u8; 4]")

        assert layout.decode(b"abcd") == b"abcd"
        with pytest.raises(ValueError):
            layout.encode(b"abc")

    def test_other_arrays_decode_to_tuples(self) -> None:
        layout = layout_of("[u16; 2]")

        assert layout.decode(b"\x01\x00\x02\x00") == (1, 2)
        assert layout.encode([3, 4]) == b"\x03\x00\x04\x00"

    def test_decode_checks_length(self) -> None:
        with pytest.raises(ValueError):
            layout_of("u16").decode(b"\x01")

    def test_integer_overflow_rejected(self) -> None:
        with pytest.raises(OverflowError):
            layout_of("u8").encode(256)
