import pytest

from conftest import KEY, NONCE, EchoCipher, pattern, reference_ctr
from ctrseek.cipher.block import AESBlockCipher, KeyedBlockCipher
from ctrseek.errors import CounterLengthError
from ctrseek.keystream import CTRStream, KeystreamState, xor_into


def test_xor_into_in_place():
    buf = bytearray(b"\x0f\xf0\xaa")
    xor_into(buf, buf, b"\xff\xff\xaa")
    assert buf == bytearray(b"\xf0\x0f\x00")


def test_xor_into_empty_is_noop():
    buf = bytearray()
    xor_into(buf, b"", b"")
    assert buf == bytearray()


def test_aes_block_matches_reference(aes):
    # One CTR block of zeros is E(nonce)
    assert aes.encrypt_block(NONCE) == reference_ctr(KEY, NONCE, bytes(16))


def test_aes_rejects_bad_key():
    with pytest.raises(ValueError):
        AESBlockCipher(b"short")


def test_encrypt_blocks_default_loops():
    cipher = EchoCipher(4)
    assert cipher.encrypt_blocks(b"abcdefgh") == b"abcdefgh"
    with pytest.raises(ValueError):
        cipher.encrypt_blocks(b"abc")


def test_refill_fills_whole_blocks_up_to_capacity():
    state = KeystreamState(EchoCipher(4), bytearray(4), buffer_size=18)
    state.refill()
    assert len(state.out) == 16
    assert state.out == b"\x00\x00\x00\x00\x00\x00\x00\x01\x00\x00\x00\x02\x00\x00\x00\x03"
    assert state.counter == bytearray(b"\x00\x00\x00\x04")


def test_refill_keeps_unconsumed_tail():
    state = KeystreamState(EchoCipher(2), bytearray(2), buffer_size=6)
    state.refill()
    state.used = 5
    state.refill()
    assert state.out == b"\x02\x00\x03\x00\x04"
    assert state.base == 5
    assert state.used == 0


def test_buffer_never_smaller_than_one_block():
    state = KeystreamState(EchoCipher(16), bytearray(16), buffer_size=1)
    assert state.capacity == 16


def test_at_offset_trims_leading_bytes():
    state = KeystreamState.at_offset(EchoCipher(2), b"\x00\x00", 5)
    assert state.position == 5
    assert state.base == 4
    assert state.out[state.used:state.used + 3] == b"\x02\x00\x03"


def test_seek_within_buffer():
    state = KeystreamState.at_offset(EchoCipher(2), b"\x00\x00", 0, buffer_size=8)
    assert state.seek(7)
    assert state.position == 7
    assert state.seek(8)
    assert not state.seek(9)


def test_keystream_wraps_counter():
    cipher = EchoCipher(2)
    stream = CTRStream(cipher, b"\xff\xfe")
    assert stream.update(bytes(8)) == b"\xff\xfe\xff\xff\x00\x00\x00\x01"


@pytest.mark.parametrize("buffer_size", [1, 16, 17, 100, 512, 4096])
def test_stream_matches_reference(aes, buffer_size):
    data = pattern(3000)
    out = CTRStream(aes, NONCE, buffer_size=buffer_size).update(data)
    assert out == reference_ctr(KEY, NONCE, data)


def test_stream_in_pieces_matches_one_shot(aes):
    data = pattern(2000)
    stream = CTRStream(aes, NONCE, buffer_size=48)
    parts = []
    for size in (1, 15, 16, 17, 500, 1451):
        chunk = data[sum(len(p) for p in parts):][:size]
        parts.append(stream.update(chunk))
    assert b"".join(parts) == reference_ctr(KEY, NONCE, data)
    assert stream.position == 2000


def test_stream_from_offset(aes):
    data = pattern(1000)
    ct = reference_ctr(KEY, NONCE, data)
    stream = CTRStream(aes, NONCE, offset=333)
    assert stream.update(ct[333:]) == data[333:]


def test_stream_xor_keystream_in_place(aes):
    buf = bytearray(pattern(100))
    CTRStream(aes, NONCE).xor_keystream(buf, buf)
    assert bytes(buf) == reference_ctr(KEY, NONCE, pattern(100))


def test_stream_rejects_short_output(aes):
    with pytest.raises(ValueError):
        CTRStream(aes, NONCE).xor_keystream(bytearray(3), b"abcd")


def test_stream_rejects_wrong_counter_length(aes):
    with pytest.raises(CounterLengthError):
        CTRStream(aes, bytes(8))


class _XorWithKey:
    def encrypt_block(self, block, key):
        return bytes(a ^ b for a, b in zip(block, key))


def test_keyed_cipher_binding():
    cipher = KeyedBlockCipher(_XorWithKey(), key=b"\xaa" * 4, block_size=4)
    ks = CTRStream(cipher, bytes(4)).update(bytes(8))
    assert ks == b"\xaa\xaa\xaa\xaa\xaa\xaa\xaa\xab"
