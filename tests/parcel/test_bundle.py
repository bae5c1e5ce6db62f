"""Tests for bundle decoding.

Covers:
- End-to-end bundles with long, boolean and parcelable entries
- Empty bundles and trailing bytes
- Presence flag, negative length and count framing errors
- Strict magic and length verification settings
- Result envelope wrapper
"""

import pytest

from parcelspine.core.errors import (
    CreatorNotFoundError,
    FramingError,
    LengthMismatchError,
    TruncationError,
)
from parcelspine.core.result import Err, Ok
from parcelspine.core.settings import DecoderSettings
from parcelspine.parcel.bundle import (
    BUNDLE_MAGIC_NATIVE,
    Bundle,
    decode_bundle_result,
    read_bundle,
)
from parcelspine.parcel.cursor import ParcelCursor
from parcelspine.parcel.records import PowerMonitor, PowerMonitorType
from parcelspine.parcel.values import BooleanArray, LongArray, Null, ParcelableArray
from tests._support.parcel_builder import ParcelBuilder


class TestBundleEndToEnd:
    def test_single_long_array_entry(self, registry, settings):
        data = (
            ParcelBuilder()
            .bundle_header(count=1, magic=0x12345678)
            .string("ids")
            .long_array_value([7, 42])
            .finish_bundle()
        )
        bundle = Bundle.from_bytes(data, registry, settings)
        assert dict(bundle) == {"ids": LongArray((7, 42))}

    def test_mixed_entries(self, registry, settings):
        data = (
            ParcelBuilder()
            .bundle_header(count=3)
            .string("timestamps")
            .long_array_value([1000, 2000])
            .string("flags")
            .boolean_array_value([True, False])
            .string("monitors")
            .parcelable_array_value(
                [(PowerMonitor.TYPE_NAME, lambda b: b.power_monitor(2, 1, "[L2S]:DDR"))]
            )
            .finish_bundle()
        )
        bundle = Bundle.from_bytes(data, registry, settings)

        assert len(bundle) == 3
        assert set(bundle.items()) >= {
            ("timestamps", LongArray((1000, 2000))),
            ("flags", BooleanArray((True, False))),
        }
        assert bundle["monitors"] == ParcelableArray(
            (PowerMonitor(2, PowerMonitorType.MEASUREMENT, "[L2S]:DDR"),)
        )

    def test_cursor_stops_after_bundle(self, registry, settings):
        builder = ParcelBuilder().bundle_header(count=1).string("e").long_array_value([1])
        data = builder.finish_bundle() + b"\xaa\xbb\xcc\xdd"
        cursor = ParcelCursor(data)
        read_bundle(cursor, registry, settings)
        assert cursor.data_avail() == 4

    def test_duplicate_keys_last_write_wins(self, registry, settings):
        data = (
            ParcelBuilder()
            .bundle_header(count=2)
            .string("k")
            .long_array_value([1])
            .string("k")
            .long_array_value([2])
            .finish_bundle()
        )
        bundle = Bundle.from_bytes(data, registry, settings)
        assert dict(bundle) == {"k": LongArray((2,))}

    def test_boolean_null_entry(self, registry, settings):
        data = (
            ParcelBuilder()
            .bundle_header(count=1)
            .string("b")
            .i32(23)
            .i32(100)
            .finish_bundle()
        )
        assert Bundle.from_bytes(data, registry, settings)["b"] == Null()


class TestEmptyBundle:
    def test_zero_length_is_empty(self, registry, settings):
        data = ParcelBuilder().empty_bundle().build()
        assert Bundle.from_bytes(data, registry, settings) == Bundle()

    def test_trailing_bytes_not_consumed(self, registry, settings):
        data = ParcelBuilder().empty_bundle().raw(b"garbage!").build()
        cursor = ParcelCursor(data)
        bundle = read_bundle(cursor, registry, settings)
        assert len(bundle) == 0
        assert cursor.position() == 8

    def test_zero_count_any_magic(self, registry, settings):
        data = ParcelBuilder().bundle_header(count=0, magic=-1).finish_bundle()
        assert len(Bundle.from_bytes(data, registry, settings)) == 0


class TestBundleFraming:
    @pytest.mark.parametrize("present", [0, 2, -1])
    def test_presence_flag_must_be_one(self, registry, settings, present):
        data = ParcelBuilder().i32(present).i32(0).build()
        with pytest.raises(FramingError, match="presence"):
            Bundle.from_bytes(data, registry, settings)

    def test_negative_length(self, registry, settings):
        data = ParcelBuilder().i32(1).i32(-4).build()
        with pytest.raises(FramingError, match="Bad bundle length"):
            Bundle.from_bytes(data, registry, settings)

    def test_negative_count(self, registry, settings):
        data = ParcelBuilder().bundle_header(count=-1).finish_bundle()
        with pytest.raises(FramingError):
            Bundle.from_bytes(data, registry, settings)

    def test_truncated_entries(self, registry, settings):
        data = ParcelBuilder().bundle_header(count=2).string("a").long_array_value([1]).finish_bundle()
        with pytest.raises(TruncationError):
            Bundle.from_bytes(data, registry, settings)

    def test_null_key(self, registry, settings):
        data = ParcelBuilder().bundle_header(count=1).null_string().finish_bundle()
        with pytest.raises(FramingError, match="null bundle key"):
            Bundle.from_bytes(data, registry, settings)

    def test_entry_error_names_key(self, registry, settings):
        data = (
            ParcelBuilder()
            .bundle_header(count=1)
            .string("monitors")
            .parcelable_array_value([("android.os.Missing", lambda b: None)])
            .finish_bundle()
        )
        with pytest.raises(CreatorNotFoundError) as exc_info:
            Bundle.from_bytes(data, registry, settings)
        assert exc_info.value.context.key == "monitors"


class TestBundleSettings:
    def test_unknown_magic_accepted_by_default(self, registry, settings):
        data = ParcelBuilder().bundle_header(count=0, magic=0).finish_bundle()
        assert len(Bundle.from_bytes(data, registry, settings)) == 0

    def test_strict_magic_rejects_unknown(self, registry):
        strict = DecoderSettings(strict_magic=True)
        data = ParcelBuilder().bundle_header(count=0, magic=0).finish_bundle()
        with pytest.raises(FramingError, match="magic"):
            Bundle.from_bytes(data, registry, strict)

    def test_strict_magic_accepts_native(self, registry):
        strict = DecoderSettings(strict_magic=True)
        data = ParcelBuilder().bundle_header(count=0, magic=BUNDLE_MAGIC_NATIVE).finish_bundle()
        assert len(Bundle.from_bytes(data, registry, strict)) == 0

    def test_declared_length_ignored_by_default(self, registry, settings):
        data = ParcelBuilder().bundle_header(count=0, length=400).build()
        assert len(Bundle.from_bytes(data, registry, settings)) == 0

    def test_verify_length_rejects_mismatch(self, registry):
        verifying = DecoderSettings(verify_bundle_length=True)
        data = ParcelBuilder().bundle_header(count=0, length=400).build()
        with pytest.raises(LengthMismatchError):
            Bundle.from_bytes(data, registry, verifying)

    def test_verify_length_accepts_exact(self, registry):
        verifying = DecoderSettings(verify_bundle_length=True)
        data = ParcelBuilder().bundle_header(count=1).string("x").long_array_value([5]).finish_bundle()
        assert Bundle.from_bytes(data, registry, verifying)["x"] == LongArray((5,))


class TestDecodeBundleResult:
    def test_ok(self, registry, settings):
        data = ParcelBuilder().empty_bundle().build()
        result = decode_bundle_result(data, registry, settings)
        assert isinstance(result, Ok)
        assert result.unwrap() == Bundle()

    def test_err(self, registry, settings):
        result = decode_bundle_result(b"\x00\x00\x00\x00", registry, settings)
        assert isinstance(result, Err)
        assert isinstance(result.error, FramingError)
        assert result.unwrap_or(None) is None
