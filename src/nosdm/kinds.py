class Kinds:
    def __init__(self):
        super(Kinds, self).__init__()
        self.kindclassification = ['regular', 'replaceable', 'ephemeral', 'parameterized', 'unknown']
        self.Metadata = 0
        self.ShortTextNote = 1
        self.Contacts = 3
        self.EncryptedDirectMessage = 4
        self.EventDeletion = 5
        self.Seal = 13
        self.PrivateDirectMessage = 14
        self.GiftWrap = 1059
        self.DirectMessageRelaysList = 10050

    def isRegularKind(self, kind:int) -> bool:
        return (1000 <= kind and kind < 10000) or kind in [1, 2, 4, 5, 6, 7, 8, 16, 40, 41, 42, 43, 44]

    def isReplaceableKind(self, kind:int) -> bool:
        return kind in [0, 3] or (10000 <= kind and kind < 20000)

    def isEphemeralKind(self, kind:int) -> bool:
        return 20000 <= kind and kind < 30000

    def isAddressableKind(self, kind:int) -> bool:
        return 30000 <= kind and kind < 40000

    def classifyKind(self, kind:int) -> str:
        if (self.isRegularKind(kind)): return self.kindclassification[0]
        if (self.isReplaceableKind(kind)): return self.kindclassification[1]
        if (self.isEphemeralKind(kind)): return self.kindclassification[2]
        if (self.isAddressableKind(kind)): return self.kindclassification[3]
        return self.kindclassification[-1]

ENCRYPTED_DIRECT_MESSAGE:int = Kinds().EncryptedDirectMessage
