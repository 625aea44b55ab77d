"""One APIRouter per entity resource."""
