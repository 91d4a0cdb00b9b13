"""Reference data API route declarations for skills and locations."""

from fastapi import APIRouter, Depends

from dependencies import get_reference_catalog
from services.reference_repository import SqlReferenceCatalog

router = APIRouter(tags=["reference"])


@router.get("/skills", summary="List rateable skills")
def list_skills(catalog: SqlReferenceCatalog = Depends(get_reference_catalog)) -> dict:
	"""Return every skill submissions may reference, grouped by category."""
	skills = [{"id": skill.id, "name": skill.name, "category": skill.category} for skill in catalog.list_skills()]
	return {"skills": skills, "count": len(skills)}


@router.get("/locations", summary="List submission locations")
def list_locations(catalog: SqlReferenceCatalog = Depends(get_reference_catalog)) -> dict:
	"""Return every location submissions may reference, including Remote."""
	locations = [
		{
			"id": location.id,
			"city": location.city,
			"country": location.country,
			"label": location.display_name,
			"is_remote": location.is_remote,
		}
		for location in catalog.list_locations()
	]
	return {"locations": locations, "count": len(locations)}
