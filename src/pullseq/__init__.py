"""pullseq: lazy, pull-based sequence combinators with explicit buffering state."""

from importlib.metadata import version as _version

__version__ = _version("pullseq")

from pullseq.protocol import EXHAUSTED, Exhausted, Pulled, PullSequence, Value
from pullseq.errors import InvalidArgumentError, PullSeqError, StaleGroupError
from pullseq.sources import count, of, range, repeat
from pullseq.transform import (
    chain,
    dropwhile,
    enumerate,
    filter,
    filterfalse,
    map,
    starmap,
    takewhile,
    weave,
    zip,
)
from pullseq.buffering import cycle, flatten, slice, take, tee
from pullseq.grouping import compress, group_by, pack
from pullseq.combinatorics import (
    combinations,
    combinations_with_replacement,
    permutations,
    product,
)
from pullseq.materialize import (
    first,
    foldl,
    foldl1,
    foldr,
    foldr1,
    for_each,
    join,
    last,
    takenth,
    to_list,
)
from pullseq.config import buffer_warning, get_buffer_warning, set_buffer_warning

__all__ = [
    "EXHAUSTED",
    "Exhausted",
    "Pulled",
    "PullSequence",
    "Value",
    "PullSeqError",
    "InvalidArgumentError",
    "StaleGroupError",
    "of",
    "count",
    "range",
    "repeat",
    "map",
    "starmap",
    "filter",
    "filterfalse",
    "dropwhile",
    "takewhile",
    "chain",
    "zip",
    "enumerate",
    "weave",
    "cycle",
    "tee",
    "slice",
    "take",
    "flatten",
    "group_by",
    "compress",
    "pack",
    "permutations",
    "combinations",
    "combinations_with_replacement",
    "product",
    "to_list",
    "first",
    "takenth",
    "last",
    "join",
    "foldl",
    "foldl1",
    "foldr",
    "foldr1",
    "for_each",
    "set_buffer_warning",
    "get_buffer_warning",
    "buffer_warning",
]
