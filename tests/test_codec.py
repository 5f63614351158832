"""Tests for the Confidentiality Codec."""

import base64

import pytest

from pandemic_kernel.confidentiality.codec import (
    SEAL_PREFIX,
    DecodeError,
    SealedValue,
    TextEnvelopeCodec,
)
from pandemic_kernel.models.session import ErrorKind


class TestTextEnvelopeCodec:
    def setup_method(self):
        self.codec = TextEnvelopeCodec()

    @pytest.mark.parametrize("value", [0, 1, 2, 3])
    def test_round_trip_disease_levels(self, value):
        assert self.codec.unseal(self.codec.seal(value)) == value

    def test_round_trip_outside_level_range(self):
        for value in (-7, 42, 10**12):
            assert self.codec.unseal(self.codec.seal(value)) == value

    def test_sealed_form_is_prefixed_base64(self):
        sealed = self.codec.seal(2)
        assert sealed.startswith(SEAL_PREFIX)
        assert sealed == "FHE-" + base64.b64encode(b"2").decode("ascii")
        assert "2" not in sealed[len(SEAL_PREFIX):]

    def test_bare_integer_decodes_as_legacy_record(self):
        assert self.codec.unseal(SealedValue("3")) == 3

    @pytest.mark.parametrize("bad", [
        "FHE-",
        "FHE-!!not-base64!!",
        "FHE-" + base64.b64encode(b"three").decode("ascii"),
        "FHE-" + base64.b64encode(b"1.5").decode("ascii"),
        "FHE-é",
        "hidden",
        "",
    ])
    def test_malformed_values_raise_decode_error(self, bad):
        with pytest.raises(DecodeError) as exc:
            self.codec.unseal(SealedValue(bad))
        assert exc.value.kind == ErrorKind.DECODE_ERROR

    def test_non_text_raises_decode_error(self):
        with pytest.raises(DecodeError):
            self.codec.unseal(3)

    def test_only_integers_can_be_sealed(self):
        with pytest.raises(TypeError):
            self.codec.seal(1.5)
        with pytest.raises(TypeError):
            self.codec.seal(True)
