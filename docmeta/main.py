import os
import sys
import pickle
import shutil
import logging
import argparse
import traceback
import networkx as nx
import pathspec
from pathlib import Path
from concurrent.futures import ThreadPoolExecutor
from tqdm import tqdm

from docmeta.adapters.component_adapter import adapt_component_metadata
from docmeta.errors import ExtractionError
from docmeta.extractors.react_extractor import file_node
from docmeta.registry.extractor_registry import get_extractor
from docmeta.utils.networkx_graph import load_components_by_file, replace_file_nodes

logger = logging.getLogger("docmeta")

EXT_MAP = {
    "javascript": [".js", ".jsx", ".mjs", ".cjs"],
    "typescript": [".ts", ".tsx"],
}

INVERSE_EXTS = {ext: lang for lang, exts in EXT_MAP.items() for ext in exts}

GRAPH_NAME = "component_metadata"


def configure_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[docmeta] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)
    return logger


def _output_path(code_path, root_dir_path, output_base_path):
    rel_path = os.path.relpath(code_path, root_dir_path)
    return os.path.join(output_base_path, rel_path + ".json")


def _process_single_file_worker(args):
    code_path, language_str, root_dir_path, output_base_path, options = args
    try:
        extractor_instance = get_extractor(language_str, options)
        extractor_instance.process_file(str(code_path))
        extractor_instance.write_to_file(_output_path(code_path, root_dir_path, output_base_path))
        return extractor_instance.node, extractor_instance.extract_all_components()
    except ExtractionError as e:
        logger.debug(traceback.format_exc())
        logger.error(f"Unable to process - {code_path}. Skipping it.\n{e.message}\n{e.code_frame or ''}")
    except Exception as e:
        logger.error(traceback.format_exc())
        logger.error(f"Unable to process - {code_path}. Skipping it. ({e})")
    return None


def collect_source_files(root_dir: Path):
    gitignore_pth = root_dir / ".gitignore"
    gitign_pattern = gitignore_pth.read_text().splitlines() if gitignore_pth.exists() else []
    gitign_pattern.append("node_modules/")
    spec = pathspec.PathSpec.from_lines("gitwildmatch", gitign_pattern)

    files = []
    for file_path in sorted(root_dir.rglob("*")):
        if not file_path.is_file():
            continue
        if spec.match_file(str(file_path.relative_to(root_dir))):
            continue
        language = INVERSE_EXTS.get(file_path.suffix)
        if language:
            files.append((file_path, language))
    return files


def write_graph(G, graph_dir):
    graph_ml = os.path.join(graph_dir, f"{GRAPH_NAME}.graphml")
    graph_gp = os.path.join(graph_dir, f"{GRAPH_NAME}.gpickle")

    nx.write_graphml(G, graph_ml)
    with open(graph_gp, "wb") as f:
        pickle.dump(G, f)
    return graph_ml, graph_gp


def create_component_data(root_dir, output_base: str = "./output/components", graph_dir: str = "./output/graph",
                          clear_existing: bool = True, options: dict = None, max_workers: int = None):
    """
    Extract component metadata for every JS/TS file under root_dir, write one
    JSON file of normalized components per source file and the emitted node
    graph. Returns the graph.
    """
    os.environ["ROOT_DIR"] = str(root_dir)
    root_dir = Path(root_dir)
    files = collect_source_files(root_dir)

    if os.path.isdir(output_base) and clear_existing:
        shutil.rmtree(output_base, ignore_errors=True)
        shutil.rmtree(graph_dir, ignore_errors=True)

    os.makedirs(output_base, exist_ok=True)
    os.makedirs(graph_dir, exist_ok=True)

    tasks_args = [(code_path, language, root_dir, output_base, options) for code_path, language in files]
    workers = max_workers or min(32, (os.cpu_count() or 1) + 4)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(tqdm(executor.map(_process_single_file_worker, tasks_args),
                            total=len(tasks_args), desc="components", disable=not tasks_args))

    G = nx.DiGraph()
    processed = 0
    component_count = 0
    for result in results:
        if result is None:
            continue
        node, components = result
        replace_file_nodes(G, node, adapt_component_metadata(node, components))
        processed += 1
        component_count += len(components)

    print(f"Done! {component_count} components from {processed}/{len(tasks_args)} files in: {output_base}")
    graph_ml, graph_gp = write_graph(G, graph_dir)
    print(f"Wrote {graph_ml} and {graph_gp}")
    return G


def create_graph(output_base, graph_dir, root_dir=None):
    """Rebuild the node graph from a previous run's JSON output."""
    if root_dir:
        os.environ["ROOT_DIR"] = str(root_dir)
    G = nx.DiGraph()
    for rel_json, components in load_components_by_file(output_base).items():
        source_rel = rel_json[: -len(".json")]
        source_path = os.path.join(root_dir, source_rel) if root_dir else source_rel
        node = file_node(source_path)
        replace_file_nodes(G, node, adapt_component_metadata(node, components))

    os.makedirs(graph_dir, exist_ok=True)
    graph_ml, graph_gp = write_graph(G, graph_dir)
    print(f"Wrote {graph_ml} and {graph_gp}")
    return G


def main():
    parser = argparse.ArgumentParser(description='React component metadata extraction')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='function', help='Available functions')

    # create_component_data
    parser_create = subparsers.add_parser('create_component_data', help='Extract component metadata from source code')
    parser_create.add_argument('root_dir', help='Root directory to scan for source files')
    parser_create.add_argument('--output_base', default='./output/components',
                               help='Output base directory (default: ./output/components)')
    parser_create.add_argument('--graph_dir', default='./output/graph',
                               help='Graph output directory (default: ./output/graph)')
    parser_create.add_argument('--no_clear', action='store_true',
                               help='Do not clear existing output directories')
    parser_create.add_argument('--cwd', default=None, help='Working directory handed to the extractor')
    parser_create.add_argument('--language', choices=['javascript', 'typescript', 'tsx'], default=None,
                               help='Force a tree-sitter grammar for every file')
    parser_create.add_argument('--flow', action='store_true', help='Read .js files as Flow')

    # create_graph
    parser_graph = subparsers.add_parser('create_graph', help='Build the node graph from existing JSON output')
    parser_graph.add_argument('output_base', help='Directory written by create_component_data')
    parser_graph.add_argument('--graph_dir', default='./output/graph')
    parser_graph.add_argument('--root_dir', default=None)

    args = parser.parse_args()
    configure_logging(args.verbose)

    if not args.function:
        parser.print_help()
        return

    try:
        if args.function == 'create_component_data':
            clear_existing = not args.no_clear
            parser_options = {}
            if args.language:
                parser_options["language"] = args.language
            if args.flow:
                parser_options["flow"] = True
            options = {"cwd": args.cwd or args.root_dir, "parser_options": parser_options}

            print(f"Extracting component metadata from: {args.root_dir}")
            print(f"Output base: {args.output_base}")
            print(f"Graph directory: {args.graph_dir}")
            print(f"Clear existing: {clear_existing}")

            create_component_data(
                root_dir=args.root_dir,
                output_base=args.output_base,
                graph_dir=args.graph_dir,
                clear_existing=clear_existing,
                options=options,
            )
        elif args.function == 'create_graph':
            create_graph(args.output_base, args.graph_dir, args.root_dir)

    except Exception as e:
        logger.debug(traceback.format_exc())
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
