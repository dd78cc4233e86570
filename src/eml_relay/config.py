from pydantic_settings import BaseSettings

class RelaySettings(BaseSettings):
    # Relayer API
    API_URL: str = "https://relayer-api.horizenlabs.io/api/v1"
    API_KEY: str = ""
    PROOF_TYPE: str = "groth16"
    PROOF_LIBRARY: str = "snarkjs"
    PROOF_CURVE: str = "bn128"
    CHAIN_ID: int = 845320009

    # Polling: fixed interval, bounded total wait
    POLL_INTERVAL: float = 5.0
    MAX_POLLS: int = 180
    GRACE_WAIT: float = 15.0
    HTTP_TIMEOUT: float = 30.0

    # On-chain recording (single attempt, fixed gas budget)
    RPC_URL: str = "https://horizen-rpc-testnet.appchain.base.org"
    PRIVATE_KEY: str = ""
    REGISTRY_ADDR: str = "0xbc9bc0e9d12c4d22ba1d7e0330ef822a8da2f7db"
    ZKVERIFY_ADDR: str = "0x201B6ba8EA862d83AAA03CFbaC962890c7a4d195"
    DOMAIN_ID: int = 113
    GAS_LIMIT: int = 850000

    class Config:
        case_sensitive = True
        env_file = ".env"

settings = RelaySettings()
