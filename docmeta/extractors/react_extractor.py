import os
import chardet
from typing import Dict, Any, List, Optional
from docmeta.base.component_extractor import ComponentExtractor
from docmeta.parse import parse_metadata


# ---------------------------
# File helpers
# ---------------------------

def read_source_text(file_path: str) -> str:
    with open(file_path, 'rb') as f:
        raw = f.read()
    guess = chardet.detect(raw)
    encoding = guess.get('encoding') or 'utf-8'
    return raw.decode(encoding, errors='replace')


def norm_slashes(p: str) -> str:
    return p.replace("\\", "/")


def relpath_with_repo(file_path: str) -> str:
    """
    Return a forward-slashed path prefixed with the repo folder name.
    Example:
      ROOT_DIR=/home/me/projects/repo_name
      file_path=/home/me/projects/repo_name/src/Button.jsx
      -> "repo_name/src/Button.jsx"
    """
    fp = norm_slashes(file_path)
    root = os.environ.get("ROOT_DIR", "")
    if root:
        base = os.path.basename(os.path.normpath(root))
        try:
            rel = os.path.relpath(file_path, root)
        except ValueError:
            rel = file_path
        return norm_slashes(os.path.join(base, rel))
    return fp


def file_node(file_path: str) -> Dict[str, Any]:
    """Source node describing a file on disk."""
    abs_path = os.path.abspath(file_path)
    rel = relpath_with_repo(abs_path)
    ext = os.path.splitext(abs_path)[1].lstrip(".").lower()
    return {
        "id": rel,
        "absolute_path": abs_path,
        "relative_path": rel,
        "extension": ext,
    }


# ---------------------------
# Extractor
# ---------------------------

class ReactComponentExtractor(ComponentExtractor):
    """
    Per-file component metadata extractor. Reads a JS/JSX/TS/TSX file,
    normalizes its components and keeps them for write_to_file().
    """

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        super().__init__(options)
        self.all_components: List[Dict[str, Any]] = []

    def extract_all_components(self):
        return self.all_components

    def process_file(self, file_path: str, node: Optional[Dict[str, Any]] = None):
        self.node = node or file_node(file_path)
        content = read_source_text(file_path)
        self.all_components = parse_metadata(content, self.node, self.options)

