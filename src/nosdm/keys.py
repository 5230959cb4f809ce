import secrets

from coincurve import PrivateKey, PublicKey, PublicKeyXOnly

L:int = 32

class Keys:
    """secp256k1 operations used by Nostr, backed by libsecp256k1.

    Public keys travel as 32-byte x-only values (64 hex chars); the even-y
    point is assumed when one has to be lifted back to a full point.
    """
    def __init__(self):
        super(Keys, self).__init__()

    def isValidSecretKey(self, seckey:bytes) -> bool:
        if not isinstance(seckey, bytes) or len(seckey) != L: return False
        try:
            PrivateKey(seckey)
        except ValueError:
            return False
        return True

    def randomSecretKey(self) -> bytes:
        return PrivateKey(secrets.token_bytes(L)).secret

    def getPublicKey(self, seckey:bytes, isCompressed:bool=True) -> bytes:
        return PrivateKey(seckey).public_key.format(compressed=isCompressed)

    def getXOnlyPublicKey(self, seckey:bytes) -> str:
        return self.getPublicKey(seckey)[1:].hex()

    def liftX(self, pubkey:str) -> PublicKey:
        # raises ValueError when x is not on the curve
        return PublicKey(bytes.fromhex('02' + pubkey))

    def getSharedSecret(self, seckeyA:bytes, pubkeyB:str, isCompressed:bool=True) -> bytes:
        point = self.liftX(pubkeyB).multiply(seckeyA)
        return point.format(compressed=isCompressed)

    def signSchnorr(self, message:bytes, seckey:bytes, auxRand:bytes=None) -> bytes:
        aux = secrets.token_bytes(L) if auxRand is None else auxRand
        return PrivateKey(seckey).sign_schnorr(message, aux)

    def verifySchnorr(self, message:bytes, pubkey:bytes, signature:bytes) -> bool:
        if len(pubkey) != L or len(signature) != 2 * L or len(message) != L:
            return False
        try:
            return PublicKeyXOnly(pubkey).verify(signature, message)
        except ValueError:
            return False
