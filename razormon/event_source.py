"""
Module for reading events from ROOT files using uproot

Expects a flat "Events" tree:
- MET: <met>_pt, <met>_phi and optionally <met>_sumEt (one value per event)
- jets: jagged <jets>_pt, <jets>_eta, <jets>_phi and optionally <jets>_mass
- hemispheres: jagged <hemispheres>_px, _py, _pz, _E
- HLT decisions: HLT_* boolean branches
- DCS status: DCS_<partition> boolean branches
- identifiers: run, luminosityBlock, event (optional)
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

import awkward as ak
import uproot
from tqdm import tqdm

from .modules.config import MonitorConfig
from .modules.exceptions import BranchMissingError, DataLoadError
from .modules.physics_objects import Event, MissingEnergy, Run, make_hemisphere, make_jet
from .utils.logging_config import get_tqdm_kwargs

_DCS_BRANCH = re.compile(r"^DCS_(\d+)$")


class EventSource:
    """Iterate over the events of one or more ROOT files"""

    def __init__(self, files: Sequence[str], config: MonitorConfig,
                 tree_name: str = "Events", step_size: str = "100 MB") -> None:
        """
        Initialize with input files

        Parameters:
        - files: Paths of the ROOT files to read
        - config: Monitor configuration providing the collection tags
        - tree_name: Name of the event tree
        - step_size: Chunk size passed to uproot
        """
        self.files = [Path(f) for f in files]
        self.config = config
        self.tree_name = tree_name
        self.step_size = step_size
        self.logger = logging.getLogger("RazorMonitor.EventSource")

        for path in self.files:
            if not path.exists():
                raise DataLoadError(f"Input file not found: {path}")

    def _open_tree(self, file, path: Path):
        if self.tree_name not in file:
            raise DataLoadError(f"Tree '{self.tree_name}' not found in {path}")
        return file[self.tree_name]

    def _branches(self, keys: List[str], path: Path) -> Dict[str, List[str]]:
        """Work out which branches to read for each collection"""
        met, jets, hemis = self.config.met_tag, self.config.jet_tag, self.config.hemisphere_tag

        branches = {}
        for required in (f"{met}_pt", f"{met}_phi"):
            if required not in keys:
                raise BranchMissingError(required, str(path))
        branches["met"] = [f"{met}_pt", f"{met}_phi"]
        if f"{met}_sumEt" in keys:
            branches["met"].append(f"{met}_sumEt")

        jet_branches = [f"{jets}_pt", f"{jets}_eta", f"{jets}_phi"]
        if all(b in keys for b in jet_branches):
            if f"{jets}_mass" in keys:
                jet_branches.append(f"{jets}_mass")
            branches["jets"] = jet_branches
        else:
            self.logger.warning(f"Jet collection '{jets}' not found in {path}, treating as empty")
            branches["jets"] = []

        hemi_branches = [f"{hemis}_px", f"{hemis}_py", f"{hemis}_pz", f"{hemis}_E"]
        if all(b in keys for b in hemi_branches):
            branches["hemispheres"] = hemi_branches
        else:
            self.logger.warning(f"Hemisphere collection '{hemis}' not found in {path}")
            branches["hemispheres"] = []

        branches["hlt"] = [k for k in keys if k.startswith("HLT_")]
        branches["dcs"] = [k for k in keys if _DCS_BRANCH.match(k)]
        branches["ids"] = [k for k in ("run", "luminosityBlock", "event") if k in keys]
        return branches

    def hlt_menu(self) -> Optional[List[str]]:
        """HLT path names available in the first input file"""
        if not self.files:
            return None
        with uproot.open(self.files[0]) as file:
            tree = self._open_tree(file, self.files[0])
            paths = [k for k in tree.keys() if k.startswith("HLT_")]
        return paths or None

    def run(self) -> Run:
        """Run information for booking, taken from the first input file"""
        return Run(run=1, hlt_menu=self.hlt_menu())

    def __iter__(self) -> Iterator[Event]:
        for path in self.files:
            self.logger.info(f"Processing {path}")
            try:
                file = uproot.open(path)
            except (OSError, ValueError, uproot.deserialization.DeserializationError) as e:
                raise DataLoadError(f"Cannot open {path}: {e}") from e

            with file:
                tree = self._open_tree(file, path)
                branches = self._branches(list(tree.keys()), path)
                expressions = sorted({b for group in branches.values() for b in group})

                offset = 0
                with tqdm(total=tree.num_entries, **get_tqdm_kwargs(desc=path.name)) as progress:
                    for arrays in tree.iterate(expressions, step_size=self.step_size, library="ak"):
                        yield from self._build_events(arrays, branches, offset)
                        offset += len(arrays)
                        progress.update(len(arrays))

    def _build_events(self, arrays: ak.Array, branches: Dict[str, List[str]], offset: int = 0) -> Iterator[Event]:
        columns = {field: ak.to_list(arrays[field]) for field in arrays.fields}
        met, jets, hemis = self.config.met_tag, self.config.jet_tag, self.config.hemisphere_tag

        for i in range(len(arrays)):
            collections = {}

            sum_et = columns[f"{met}_sumEt"][i] if f"{met}_sumEt" in columns else 0.0
            collections[met] = [MissingEnergy.from_polar(columns[f"{met}_pt"][i], columns[f"{met}_phi"][i], sum_et)]

            if branches["jets"]:
                masses = columns[f"{jets}_mass"][i] if f"{jets}_mass" in columns else None
                collections[jets] = [
                    make_jet(pt, eta, phi, masses[j] if masses is not None else 0.0)
                    for j, (pt, eta, phi) in enumerate(zip(columns[f"{jets}_pt"][i],
                                                           columns[f"{jets}_eta"][i],
                                                           columns[f"{jets}_phi"][i]))
                ]

            if branches["hemispheres"]:
                collections[hemis] = [
                    make_hemisphere(px, py, pz, E)
                    for px, py, pz, E in zip(columns[f"{hemis}_px"][i], columns[f"{hemis}_py"][i],
                                             columns[f"{hemis}_pz"][i], columns[f"{hemis}_E"][i])
                ]

            trigger_results = {b: bool(columns[b][i]) for b in branches["hlt"]} or None
            dcs_status = {int(_DCS_BRANCH.match(b).group(1)): bool(columns[b][i])
                          for b in branches["dcs"]} or None

            yield Event(
                run=columns["run"][i] if "run" in columns else 1,
                lumi=columns["luminosityBlock"][i] if "luminosityBlock" in columns else 1,
                event=columns["event"][i] if "event" in columns else offset + i,
                collections=collections,
                trigger_results=trigger_results,
                dcs_status=dcs_status,
            )
