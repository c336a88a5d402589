"""
Unit-тесты для структур ключей и их сериализации.
"""

import base64
import json

import pytest

from src.security.aead.core.exceptions import ParseError
from src.security.aead.core.messages import (
    TYPE_URL_PREFIX,
    AesGcmSivKey,
    AesGcmSivKeyFormat,
    KeyData,
    KeyMaterialType,
    KeyTemplate,
    OutputPrefixType,
    type_url_for,
)


class TestSerialization:
    def test_key_serialized_form(self) -> None:
        key = AesGcmSivKey(version=0, key_value=b"16 bytes of key ")

        obj = json.loads(key.serialize())

        assert obj == {
            "@type": "google.crypto.tink.AesGcmSivKey",
            "version": 0,
            "key_value": base64.b64encode(b"16 bytes of key ").decode("ascii"),
        }

    def test_serialization_is_deterministic(self) -> None:
        key_data = KeyData(
            type_url="type.googleapis.com/google.crypto.tink.AesGcmSivKey",
            value=b"\x00\x01",
            key_material_type=KeyMaterialType.SYMMETRIC,
        )
        assert key_data.serialize() == KeyData.parse(key_data.serialize()).serialize()

    @pytest.mark.parametrize(
        "message",
        [
            AesGcmSivKey(version=0, key_value=bytes(range(32))),
            AesGcmSivKeyFormat(key_size=16),
            KeyData(type_url="x", value=b"v", key_material_type=KeyMaterialType.SYMMETRIC),
            KeyTemplate(type_url="x", value=b"v", output_prefix_type=OutputPrefixType.RAW),
        ],
    )
    def test_parse_restores_message(self, message) -> None:
        assert type(message).parse(message.serialize()) == message

    def test_parse_accepts_str(self) -> None:
        fmt = AesGcmSivKeyFormat(key_size=32)
        assert AesGcmSivKeyFormat.parse(fmt.serialize().decode("utf-8")) == fmt

    def test_missing_fields_take_defaults(self) -> None:
        key = AesGcmSivKey.parse(b'{"@type":"google.crypto.tink.AesGcmSivKey"}')
        assert key.version == 0
        assert key.key_value == b""

    def test_key_value_hidden_from_repr(self) -> None:
        key = AesGcmSivKey(version=0, key_value=b"super secret key")
        assert "super secret key" not in repr(key)


class TestParseErrors:
    @pytest.mark.parametrize(
        "data",
        [
            b"some bad serialized proto",
            b"\xff\xfe\x00",
            b"",
            b"[]",
            b'{"version": 0}',
            b'{"@type": "google.crypto.tink.AesEaxKey", "version": 0}',
            b'{"@type": "google.crypto.tink.AesGcmSivKey", "extra": 1}',
            b'{"@type": "google.crypto.tink.AesGcmSivKey", "version": -1}',
            b'{"@type": "google.crypto.tink.AesGcmSivKey", "version": 4294967296}',
            b'{"@type": "google.crypto.tink.AesGcmSivKey", "version": "0"}',
            b'{"@type": "google.crypto.tink.AesGcmSivKey", "version": true}',
            b'{"@type": "google.crypto.tink.AesGcmSivKey", "key_value": 5}',
            b'{"@type": "google.crypto.tink.AesGcmSivKey", "key_value": "not base64!"}',
            b'{"@type":"google.crypto.tink.AesGcmSivKey","version":' + b"1" * 5000 + b"}",
            b"[" * 100000 + b"]" * 100000,
        ],
    )
    def test_malformed_key(self, data: bytes) -> None:
        with pytest.raises(ParseError, match="could not parse"):
            AesGcmSivKey.parse(data)

    def test_unknown_enum_value(self) -> None:
        data = b'{"@type": "google.crypto.tink.KeyData", "key_material_type": "quantum"}'
        with pytest.raises(ParseError, match="unknown value"):
            KeyData.parse(data)

    def test_error_names_target_type(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            AesGcmSivKeyFormat.parse(b"garbage")
        assert exc_info.value.type_name == "google.crypto.tink.AesGcmSivKeyFormat"


class TestTypeUrl:
    def test_type_url_for(self) -> None:
        assert (
            type_url_for(AesGcmSivKey())
            == "type.googleapis.com/google.crypto.tink.AesGcmSivKey"
        )

    def test_prefix(self) -> None:
        assert TYPE_URL_PREFIX == "type.googleapis.com/"

    def test_type_name_property(self) -> None:
        assert AesGcmSivKeyFormat().type_name == AesGcmSivKeyFormat.TYPE_NAME

    def test_defaults(self) -> None:
        assert KeyData().key_material_type is KeyMaterialType.UNKNOWN_KEYMATERIAL
        assert KeyTemplate().output_prefix_type is OutputPrefixType.TINK
