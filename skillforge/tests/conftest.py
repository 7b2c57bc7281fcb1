"""
Pytest fixtures for Skillforge tests.
"""

import pytest

from ..catalog import Catalog, default_catalog
from ..dsl import SkillLineValidator
from ..analysis import DuplicateDetector
from ..api.service import EngineService
from ..config import EngineSettings

EXAMPLE_LINE = "- damage{amount=10;element=fire} @target ~onAttack ?mobwithin{r=5} 0.5 <50%"

SAMPLE_DOCUMENT = """\
FireImp:
  Type: BLAZE
  Health: 40
  Skills:
  # Opening
  - skill{s=FireBurst} @target ~onAttack
  - heal{amount=5} @self ~onDamaged
  # Escape
  - teleport @self ~onDamaged <25%
FireBurst:
  Skills:
  - damage{amount=10} @target
  - effect:particles{p=flame;a=20} @target
  - skill{s=FireBurstTrail}
FireBurstTrail:
  Skills:
  - effect:particles{p=smoke;a=5} @origin
IceShard:
  Skills:
  - damage{amount=4} @target
  - skill{s=MissingSkill}
IceNova:
  Skills:
  - damage{amount=8} @PIR{r=6}
"""


@pytest.fixture
def catalog() -> Catalog:
    """The built-in catalog."""
    return default_catalog()


@pytest.fixture
def validator(catalog: Catalog) -> SkillLineValidator:
    return SkillLineValidator(catalog)


@pytest.fixture
def detector() -> DuplicateDetector:
    """Detector with the default threshold and pacing exclusions."""
    return DuplicateDetector()


@pytest.fixture
def service(catalog: Catalog) -> EngineService:
    """Service with default settings, independent of the environment."""
    return EngineService(settings=EngineSettings(), catalog=catalog)


@pytest.fixture
def sample_document() -> str:
    return SAMPLE_DOCUMENT
