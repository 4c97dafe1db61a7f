import pytest

from deeplabel import crc32c


def test_standard_check_value():
    assert crc32c.value(b"123456789") == 0xE3069283


def test_empty_input_is_zero():
    assert crc32c.value(b"") == 0


def test_thirty_two_zero_bytes():
    assert crc32c.value(bytes(32)) == 0x8A9136AA


def test_extend_matches_concatenation():
    first = b"hello, "
    second = b"world of labelled images"
    assert crc32c.extend(crc32c.value(first), second) == crc32c.value(first + second)


def test_extend_with_empty_data_is_identity():
    crc = crc32c.value(b"abc")
    assert crc32c.extend(crc, b"") == crc


def test_accepts_bytearray_and_memoryview():
    data = b"some record payload"
    expected = crc32c.value(data)
    assert crc32c.value(bytearray(data)) == expected
    assert crc32c.value(memoryview(data)) == expected


def test_rejects_str():
    with pytest.raises(TypeError):
        crc32c.value("text")


def test_mask_of_zero_is_delta():
    assert crc32c.mask(0) == crc32c.MASK_DELTA == 0xA282EAD8


@pytest.mark.parametrize("crc", [0, 1, 0xFFFFFFFF, 0x12345678, 0xE3069283])
def test_mask_unmask_round_trip(crc):
    masked = crc32c.mask(crc)
    assert 0 <= masked <= 0xFFFFFFFF
    assert crc32c.unmask(masked) == crc


def test_masked_value_differs_from_crc():
    crc = crc32c.value(b"payload")
    assert crc32c.mask(crc) != crc
    assert crc32c.unmask(crc32c.mask(crc)) == crc


def test_different_data_gives_different_crc():
    assert crc32c.value(b"a") != crc32c.value(b"b")