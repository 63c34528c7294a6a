"""Tests for zimdecode.header."""
from __future__ import annotations

import io
import struct

import pytest

from zim_factory import UUID, build_header
from zimdecode.errors import InvalidMagicNumberError, ShortReadError
from zimdecode.header import HEADER_SIZE, ZIM_MAGIC_NUMBER, decode_header, parse_header


class TestParseHeader:
    def test_all_fields(self) -> None:
        raw = build_header(
            major=5, minor=2, article_count=11, cluster_count=3,
            path_ptr_pos=0x1000, title_idx_pos=0x2000, cluster_ptr_pos=0x3000,
            mime_list_pos=80, main_page=7, layout_page=0xFFFFFFFF,
            checksum_pos=0x123456789A,
        )
        assert len(raw) == HEADER_SIZE
        header = parse_header(io.BytesIO(raw))
        assert header.magic_number == ZIM_MAGIC_NUMBER
        assert header.major_version == 5
        assert header.minor_version == 2
        assert header.uuid == UUID
        assert header.article_count == 11
        assert header.cluster_count == 3
        assert header.path_ptr_pos == 0x1000
        assert header.title_idx_pos == 0x2000
        assert header.cluster_ptr_pos == 0x3000
        assert header.mime_list_pos == 80
        assert header.main_page == 7
        assert header.layout_page == 0xFFFFFFFF
        assert header.checksum_pos == 0x123456789A

    def test_consumes_exactly_80_bytes(self) -> None:
        src = io.BytesIO(build_header() + b"trailing")
        parse_header(src)
        assert src.tell() == 80

    def test_field_byte_offsets(self) -> None:
        raw = bytearray(build_header())
        struct.pack_into("<I", raw, 64, 42)        # main_page
        struct.pack_into("<Q", raw, 72, 999)       # checksum_pos
        struct.pack_into("<Q", raw, 48, 0xABCDEF)  # cluster_ptr_pos
        header = decode_header(bytes(raw))
        assert header.main_page == 42
        assert header.checksum_pos == 999
        assert header.cluster_ptr_pos == 0xABCDEF

    def test_derived_properties(self) -> None:
        header = decode_header(build_header(major=6, minor=3, main_page=0xFFFFFFFF))
        assert header.version == "6.3"
        assert header.uuid_hex == UUID.hex()
        assert header.has_main_page is False
        assert header.has_layout_page is False

        header = decode_header(build_header(main_page=4, layout_page=9))
        assert header.has_main_page is True
        assert header.has_layout_page is True


class TestHeaderErrors:
    @pytest.mark.parametrize("magic", [0, 0x044D495B, 0x5A494D04, 0xFFFFFFFF])
    def test_bad_magic(self, magic: int) -> None:
        with pytest.raises(InvalidMagicNumberError) as excinfo:
            parse_header(io.BytesIO(build_header(magic=magic)))
        assert excinfo.value.found == magic

    def test_bad_magic_regardless_of_rest(self) -> None:
        raw = b"ABCD" + b"\xff" * 76
        with pytest.raises(InvalidMagicNumberError):
            parse_header(io.BytesIO(raw))

    def test_short_source(self) -> None:
        raw = build_header()[:79]
        with pytest.raises(ShortReadError) as excinfo:
            parse_header(io.BytesIO(raw))
        assert excinfo.value.expected == 80
        assert excinfo.value.actual == 79

    def test_short_source_with_bad_magic_is_short_read(self) -> None:
        with pytest.raises(ShortReadError):
            parse_header(io.BytesIO(b"XXXX" + b"\x00" * 10))

    def test_format_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_header(io.BytesIO(b"\x00" * 80))
