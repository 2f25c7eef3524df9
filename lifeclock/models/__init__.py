from .choice import Category, ChoiceRecord
from .life_parameters import HealthCondition, LifeParametersRecord

__all__ = [
    "Category",
    "ChoiceRecord",
    "HealthCondition",
    "LifeParametersRecord",
]
