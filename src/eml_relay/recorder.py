"""On-chain recording of an aggregated commitment statement."""
from __future__ import annotations

from dataclasses import dataclass, field

from web3 import Web3

from .config import RelaySettings, settings as default_settings

ZKVERIFY_ABI = [{
    "name": "verifyProofAggregation",
    "type": "function",
    "stateMutability": "view",
    "inputs": [
        {"name": "domainId", "type": "uint256"},
        {"name": "aggregationId", "type": "uint256"},
        {"name": "leaf", "type": "bytes32"},
        {"name": "merklePath", "type": "bytes32[]"},
        {"name": "leafCount", "type": "uint256"},
        {"name": "index", "type": "uint256"},
    ],
    "outputs": [{"name": "", "type": "bool"}],
}]

_RECORD_TAIL = [
    {"name": "aggregationId", "type": "uint256"},
    {"name": "domainId", "type": "uint256"},
    {"name": "merklePath", "type": "bytes32[]"},
    {"name": "leafCount", "type": "uint256"},
    {"name": "index", "type": "uint256"},
    {"name": "relayerTxHash", "type": "bytes32"},
]

REGISTRY_ABI = [
    {
        "name": "recordAfterAggregation",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "publicInputsHash", "type": "uint256"}] + _RECORD_TAIL,
        "outputs": [],
    },
    {
        "name": "recordWithLeaf",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "leaf", "type": "bytes32"}] + _RECORD_TAIL,
        "outputs": [],
    },
]


@dataclass
class AggregationReceipt:
    domain_id: int
    aggregation_id: int
    leaf: str | None
    merkle_path: list[str] = field(default_factory=list)
    leaf_count: int = 0
    index: int = 0
    tx_hash: str | None = None

    @classmethod
    def from_job(cls, job: dict, domain_id: int) -> "AggregationReceipt":
        agg = job.get("aggregationDetails") or {}
        return cls(
            domain_id=domain_id,
            aggregation_id=int(job["aggregationId"]),
            leaf=agg.get("leaf"),
            merkle_path=list(agg.get("merkleProof") or []),
            leaf_count=int(agg.get("numberOfLeaves", 0)),
            index=int(agg.get("leafIndex", 0)),
            tx_hash=job.get("txHash"),
        )

    def effective_leaf(self, computed: bytes) -> str:
        """Aggregator leaf when well-formed, else the recomputed one."""
        if self.leaf and len(self.leaf) == 66:
            return self.leaf
        return Web3.to_hex(computed)


class Recorder:
    def __init__(self, settings: RelaySettings | None = None, w3: Web3 | None = None):
        self.settings = settings or default_settings
        self.w3 = w3 or Web3(Web3.HTTPProvider(self.settings.RPC_URL))
        self.account = self.w3.eth.account.from_key(self.settings.PRIVATE_KEY)
        self.zkverify = self.w3.eth.contract(
            address=Web3.to_checksum_address(self.settings.ZKVERIFY_ADDR), abi=ZKVERIFY_ABI
        )
        self.registry = self.w3.eth.contract(
            address=Web3.to_checksum_address(self.settings.REGISTRY_ADDR), abi=REGISTRY_ABI
        )

    def verify_aggregation(self, receipt: AggregationReceipt, leaf: str) -> bool:
        return bool(self.zkverify.functions.verifyProofAggregation(
            receipt.domain_id,
            receipt.aggregation_id,
            leaf,
            receipt.merkle_path,
            receipt.leaf_count,
            receipt.index,
        ).call())

    def record(self, receipt: AggregationReceipt, public_inputs_hash: bytes, computed_leaf: bytes) -> str:
        """Single attempt with a fixed gas budget; no retry."""
        tail = (
            receipt.aggregation_id,
            receipt.domain_id,
            receipt.merkle_path,
            receipt.leaf_count,
            receipt.index,
            receipt.tx_hash,
        )
        if receipt.leaf and len(receipt.leaf) == 66 and receipt.leaf.lower() != Web3.to_hex(computed_leaf).lower():
            print("Using aggregator leaf directly")
            fn = self.registry.functions.recordWithLeaf(receipt.leaf, *tail)
        else:
            fn = self.registry.functions.recordAfterAggregation(
                int.from_bytes(public_inputs_hash, "big"), *tail
            )

        tx = fn.build_transaction({
            "from": self.account.address,
            "nonce": self.w3.eth.get_transaction_count(self.account.address),
            "gas": self.settings.GAS_LIMIT,
            "chainId": self.w3.eth.chain_id,
        })
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        print(f"record tx: {Web3.to_hex(tx_hash)}")
        self.w3.eth.wait_for_transaction_receipt(tx_hash)
        print("recorded.")
        return Web3.to_hex(tx_hash)
