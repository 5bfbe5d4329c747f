import os
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class ComponentExtractor(ABC):
    """
    Extracts the components of one source file at a time. `node` is the
    source node of the last processed file.
    """

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self.options = options or {}
        self.node: Optional[Dict[str, Any]] = None

    @abstractmethod
    def process_file(self, file_path: str, node: Optional[Dict[str, Any]] = None):
        pass

    @abstractmethod
    def extract_all_components(self) -> List[Dict[str, Any]]:
        pass

    def write_to_file(self, output_path: str):
        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.extract_all_components(), f, indent=2, ensure_ascii=False)
