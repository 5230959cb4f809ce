from .exceptions import KeyDecodeError
from .nips import Nips

class Identity(Nips):
    """Keypair of the running session. Lives in memory only."""
    def __init__(self, seckey:bytes=None):
        super(Identity, self).__init__()
        if seckey is None:
            seckey = self.randomSecretKey()
        elif not self.isValidSecretKey(seckey):
            raise KeyDecodeError("secret key must be 32 bytes inside the curve order")
        self.seckey:bytes = seckey
        self.pubkey:str = self.getXOnlyPublicKey(seckey)

    def __repr__(self) -> str:
        return f"Identity(pubkey={self.pubkey!r})"

    @property
    def npub(self) -> str:
        return self.bech32_encode(self.pubkey, 'npub')

    def sharedSecret(self, peer:str) -> bytes:
        return self.computeSharedSecret(self.seckey, peer)

def decodePeer(encoded:str) -> str:
    return Nips().decodePublicKey(encoded)
