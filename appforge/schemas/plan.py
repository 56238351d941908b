"""Application plan produced by the first generation step.

The model is prompted with camelCase keys, so every field accepts its
camelCase alias as well as the Python name.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PlanModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlanPage(PlanModel):
    name: str
    route: str = "/"


class PlanColumn(PlanModel):
    name: str
    type: str = Field(..., description="SQLite column type, e.g. 'TEXT PRIMARY KEY'")


class PlanTable(PlanModel):
    name: str
    columns: list[PlanColumn] = Field(default_factory=list)


class PlanDataModel(PlanModel):
    tables: list[PlanTable]


class AppPlan(PlanModel):
    """Structured description of the application to generate."""

    app_name: str = Field(..., min_length=1, description="kebab-case application name")
    pages: list[PlanPage]
    data_model: PlanDataModel
    features: list[str] = Field(default_factory=list)
    needs_auth: bool = False
    needs_file_storage: bool = False

    def to_prompt_json(self) -> str:
        """Serialize with the camelCase keys the prompts use."""
        return self.model_dump_json(by_alias=True, indent=2)
