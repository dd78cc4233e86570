ERRORS = {
  "E_LAYOUT_MISSING": "Required file or directory missing",
  "E_MANIFEST_JSON": "Manifest JSON invalid",
  "E_SIG_INVALID": "Manifest signature invalid",
  "E_INTEGRITY_MISMATCH": "Integrity root does not match manifest",
  "E_R1CS_MAGIC": "Constraint file missing r1cs magic bytes",
  "E_PUBLIC_COUNT": "Public signal count is not 1 (stale key/circuit mismatch)",
  "E_PUBLIC_RANGE": "Public signal is not a canonical field element",
  "E_POLICY_TRUST": "Publisher key not trusted",
}
