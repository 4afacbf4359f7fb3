"""
Fixed geographic coordinate model shared by every geoPoint field.
"""

import logging

from pb_model_generator.ast_codegen.models import (
    GENERATED_NOTICE, MemberSpec, ModelClassSpec, ModelModule, collect_imports, render_model_module,
)
from pb_model_generator.constants import OutputFiles
from pb_model_generator.domain.models import SemanticType


logger = logging.getLogger(__name__)


def build_geo_point_module() -> ModelModule:
    """Builds the GeoPointData module; PocketBase sends points as {"lon": .., "lat": ..}."""
    data_class = ModelClassSpec(
        name=OutputFiles.GEO_POINT_TYPE,
        docstring="Geographic point of a PocketBase geoPoint field.",
        members=(
            MemberSpec("longitude", "lon", "float", nullable=False, semantic=SemanticType.DOUBLE),
            MemberSpec("latitude", "lat", "float", nullable=False, semantic=SemanticType.DOUBLE),
        ),
    )
    return ModelModule(
        module_name=OutputFiles.GEO_POINT_MODULE,
        docstring=f"Geographic point model for PocketBase geoPoint fields.\n\n{GENERATED_NOTICE}\n",
        imports=tuple(collect_imports(data_class)),
        enums=(),
        data_class=data_class,
    )


def generate_geo_point_code() -> str:
    """Generate the geo point module source; it does not depend on any collection."""
    return render_model_module(build_geo_point_module())
