"""Relayer client: register verification key, submit proof, poll for aggregation."""
from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Callable

import requests

from .config import RelaySettings, settings as default_settings

AGGREGATED = "Aggregated"
FAILED = "Failed"


class RelayerError(RuntimeError):
    pass


class AggregationTimeout(RelayerError):
    pass


class RelayerClient:
    def __init__(
        self,
        settings: RelaySettings | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or default_settings
        self.session = session or requests.Session()
        self.sleep = sleep

    def _url(self, *parts: str) -> str:
        return "/".join([self.settings.API_URL.rstrip("/"), *parts])

    def _proof_options(self) -> dict:
        return {"library": self.settings.PROOF_LIBRARY, "curve": self.settings.PROOF_CURVE}

    def _post(self, url: str, body: dict) -> dict:
        r = self.session.post(url, json=body, timeout=self.settings.HTTP_TIMEOUT)
        r.raise_for_status()
        return r.json()

    def register_vk(self, vkey: dict, cache_path: Path) -> dict:
        """Register once; later calls reuse the cached registration."""
        if cache_path.exists():
            print("Using cached VK registration")
            return json.loads(cache_path.read_text(encoding="utf-8"))

        reg = self._post(
            self._url("register-vk", self.settings.API_KEY),
            {"proofType": self.settings.PROOF_TYPE, "proofOptions": self._proof_options(), "vk": vkey},
        )
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.write_text(json.dumps(reg), encoding="utf-8")
        print(f"VK registered: {reg}")
        return reg

    @staticmethod
    def vk_hash(registration: dict) -> str:
        h = registration.get("vkHash") or (registration.get("meta") or {}).get("vkHash")
        if not h:
            raise RelayerError("vkHash missing from VK registration response")
        return h

    def submit_proof(self, proof: dict, public: list, vk_hash: str) -> str:
        res = self._post(
            self._url("submit-proof", self.settings.API_KEY),
            {
                "proofType": self.settings.PROOF_TYPE,
                "vkRegistered": True,
                "chainId": self.settings.CHAIN_ID,
                "proofOptions": self._proof_options(),
                "proofData": {"proof": proof, "publicSignals": public, "vk": vk_hash},
            },
        )
        job_id = res.get("jobId")
        if not job_id:
            raise RelayerError("No jobId returned")
        print(f"Submitted: {res}")
        return job_id

    def job_status(self, job_id: str) -> dict:
        r = self.session.get(
            self._url("job-status", self.settings.API_KEY, job_id),
            timeout=self.settings.HTTP_TIMEOUT,
        )
        r.raise_for_status()
        return r.json()

    def wait_for_aggregation(self, job_id: str) -> dict:
        """Poll at a fixed interval up to MAX_POLLS, then give up."""
        for i in range(self.settings.MAX_POLLS):
            status = self.job_status(job_id)
            state = status.get("status")
            print(f"Job status: {state}")
            if state == AGGREGATED:
                # Grace wait: aggregation data lags the status flip.
                self.sleep(self.settings.GRACE_WAIT)
                return status
            if state == FAILED:
                raise RelayerError(f"Job {job_id} failed: {status}")
            if i + 1 < self.settings.MAX_POLLS:
                self.sleep(self.settings.POLL_INTERVAL)
        raise AggregationTimeout(
            f"Job {job_id} not aggregated after {self.settings.MAX_POLLS} polls"
        )
