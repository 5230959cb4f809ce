DEFAULT_RELAY_URL:str = "wss://relay.damus.io"
# receiver of our direct messages
DEFAULT_PEER:str = "npub1c0qyae9ggdxmrs9gnpkrc5t0dzncfgypvmrx9rzygclzyld5q4nqe9ja8j"

CONNECT_TIMEOUT:float = 20.0
PUBLISH_TIMEOUT:float = 7.0
CLOSE_TIMEOUT:float = 1.5
