from Crypto.Cipher import AES
from Crypto.Util.Padding import pad, unpad
from base64 import b64encode, b64decode
import binascii
import bech32
import secrets
import struct

from .exceptions import DecryptError, KeyDecodeError
from .keys import Keys

class Nip04(Keys):
    def __init__(self):
        super(Nip04, self).__init__()

    def computeSharedSecret(self, seckey:bytes, pubkey:str) -> bytes:
        try:
            key = self.getSharedSecret(seckey, pubkey)
        except ValueError as e:
            raise KeyDecodeError(f"invalid public key: {pubkey}") from e
        return self.getNormalizedX(key)

    def encryptContent(self, text:str, key:bytes) -> str:
        iv = secrets.token_bytes(16)
        plaintext = text.encode('utf-8')

        ciphertext = AES.new(key, AES.MODE_CBC, iv).encrypt(pad(plaintext, AES.block_size))

        ctb64 = b64encode(ciphertext).decode()
        ivb64 = b64encode(iv).decode()

        return f"{ctb64}?iv={ivb64}"

    def decryptContent(self, data:str, key:bytes) -> str:
        if not isinstance(data, str) or data.count('?iv=') != 1:
            raise DecryptError("content is not a NIP-04 payload")
        (ctb64, ivb64) = data.split('?iv=')
        try:
            iv = b64decode(ivb64, validate=True)
            ciphertext = b64decode(ctb64, validate=True)
            plaintext = unpad(AES.new(key, AES.MODE_CBC, iv).decrypt(ciphertext), AES.block_size)
            return plaintext.decode('utf-8')
        except (binascii.Error, ValueError) as e:
            raise DecryptError(f"cannot decrypt content: {e}") from e

    def aes_encrypt(self, seckey:bytes, pubkey:str, text:str) -> str:
        return self.encryptContent(text, self.computeSharedSecret(seckey, pubkey))

    def aes_decrypt(self, seckey:bytes, pubkey:str, data:str) -> str:
        return self.decryptContent(data, self.computeSharedSecret(seckey, pubkey))

    def getNormalizedX(self, key:bytes) -> bytes:
        return key[1:33]

class Nip19:
    def __init__(self):
        super(Nip19, self).__init__()

    def bech32_encode(self, entity:bytes|str|dict=None, prefix:str="") -> str:
        match prefix:
            case 'nsec'|'npub'|'note':
                data = bytes.fromhex(entity) if isinstance(entity, str) else entity
            case 'nprofile' if isinstance(entity, dict):
                data = self.encode_tlv(entity)
            case _:
                raise KeyDecodeError(f"unsupported prefix: {prefix}")
        if not isinstance(data, bytes) or len(data) == 0:
            raise KeyDecodeError(f"nothing to encode for {prefix}")
        return bech32.bech32_encode(prefix, bech32.convertbits(list(data), 8, 5, True))

    def bech32_decode(self, entity:str="") -> tuple[str, bytes|dict]:
        if not isinstance(entity, str):
            raise KeyDecodeError("bech32 entity must be a string")
        (hrp, data) = bech32.bech32_decode(entity.strip())
        if hrp is None or data is None:
            raise KeyDecodeError(f"malformed bech32 string: {entity!r}")
        converted = bech32.convertbits(data, 5, 8, False)
        if converted is None:
            raise KeyDecodeError(f"invalid bech32 padding: {entity!r}")
        data_bytes = bytes(converted)

        match hrp:
            case 'nsec'|'npub'|'note':
                return (hrp, data_bytes)
            case 'nprofile':
                profile_data:dict = {
                    'pubkey':"",
                    'relays':[],
                }
                for (t, v) in self.parse_tlv(data_bytes):
                    match t:
                        case 0:
                            profile_data['pubkey'] = v.hex()
                        case 1:
                            profile_data['relays'].append(v.decode('ascii', errors='replace'))
                        case _:
                            pass
                return (hrp, profile_data)
            case _:
                raise KeyDecodeError(f"unsupported bech32 prefix: {hrp}")

    def encode_tlv(self, data:dict) -> bytes:
        tlv_bytes:bytes = b""
        pubkey = data.get('pubkey', "")
        value = bytes.fromhex(pubkey) if isinstance(pubkey, str) else bytes(pubkey)
        tlv_bytes += struct.pack('BB', 0, len(value)) + value
        for relay in data.get('relays', []):
            value = relay.encode('utf-8')
            tlv_bytes += struct.pack('BB', 1, len(value)) + value
        return tlv_bytes

    def parse_tlv(self, data:bytes) -> list[tuple[int, bytes]]:
        tlvs:list = []
        i = 0
        while i < len(data):
            if i + 2 > len(data) or i + 2 + data[i + 1] > len(data):
                raise KeyDecodeError("truncated TLV record")
            tlvs.append((data[i], bytes(data[i + 2:i + 2 + data[i + 1]])))
            i += 2 + data[i + 1]
        return tlvs

    def decodePublicKey(self, encoded:str) -> str:
        (hrp, data) = self.bech32_decode(encoded)
        match hrp:
            case 'npub':
                pubkey = data.hex()
            case 'nprofile':
                pubkey = data['pubkey']
            case _:
                raise KeyDecodeError(f"expected npub or nprofile, got {hrp}")
        if len(pubkey) != 64:
            raise KeyDecodeError(f"public key must be 32 bytes: {encoded}")
        try:
            self.liftX(pubkey)
        except ValueError as e:
            raise KeyDecodeError(f"public key is not on the curve: {encoded}") from e
        return pubkey

class Nips(
    Nip04,
    Nip19,
):
    def __init__(self):
        super(Nips, self).__init__()
