"""Cache keys and endpoint paths for resources nested under a patient."""
from dental_client.core.query_cache import CacheKey

PATIENTS_ROOT = "/api/patients"


def is_valid_patient_id(patient_id: object) -> bool:
    """Patient resources are only readable for a positive integer id."""
    return isinstance(patient_id, int) and not isinstance(patient_id, bool) and patient_id > 0


def patients_key() -> CacheKey:
    """Prefix shared by every patient-scoped cache key."""
    return (PATIENTS_ROOT,)


def patient_resource_key(patient_id: int, resource: str) -> CacheKey:
    return (PATIENTS_ROOT, patient_id, resource)


def patient_resource_path(patient_id: int, resource: str) -> str:
    return f"{PATIENTS_ROOT}/{patient_id}/{resource}"
