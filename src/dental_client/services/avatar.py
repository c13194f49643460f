"""Presentation data for patient avatars."""
from dataclasses import dataclass

from dental_client.schemas.patient import PatientSummary

SIZE_CLASSES: dict[str, str] = {
    "sm": "h-8 w-8",
    "md": "h-10 w-10",
    "lg": "h-12 w-12",
    "xl": "h-16 w-16",
}


@dataclass(frozen=True)
class AvatarProps:
    """What a view needs to draw an avatar: an image when available, initials otherwise."""

    initials: str
    alt: str
    class_name: str
    image_src: str | None = None


def get_initials(first_name: str, last_name: str) -> str:
    """First letter of each name, upper-cased. Empty names contribute nothing."""
    return f"{first_name[:1]}{last_name[:1]}".upper()


def avatar_props(patient: PatientSummary, size: str = "md", class_name: str = "") -> AvatarProps:
    """
    Build avatar props for ``patient``.

    Raises:
        ValueError: If ``size`` is not one of sm, md, lg, xl.
    """
    if size not in SIZE_CLASSES:
        raise ValueError(f"Unknown avatar size: '{size}'")
    classes = f"{SIZE_CLASSES[size]} {class_name}".strip()
    return AvatarProps(
        initials=get_initials(patient.first_name, patient.last_name),
        alt=f"{patient.first_name} {patient.last_name}",
        class_name=classes,
        image_src=patient.profile_picture or None,
    )
