from pawvisit.directory.pets import PetCatalog
from pawvisit.directory.shelters import ShelterDirectory, calculate_distance

__all__ = ["PetCatalog", "ShelterDirectory", "calculate_distance"]
