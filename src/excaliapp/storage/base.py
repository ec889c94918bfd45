from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from .drawing_store.models import Drawing


class DrawingBackend(ABC):
    @abstractmethod
    def list_files(self) -> List["Drawing"]:
        pass

    @abstractmethod
    def get_file(self, drawing_id: str) -> "Drawing":
        pass

    @abstractmethod
    def save_file(self, drawing: "Drawing") -> "Drawing":
        pass

    @abstractmethod
    def delete_file(self, drawing_id: str) -> None:
        pass
