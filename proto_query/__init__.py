# Public surface of proto_query. Columnar helpers live in proto_query.arrow_bridge
# and are imported on demand so numpy/pyarrow load only when used.
from .exceptions import ProtoBaseException, ProtoValidationException, ProtoNotSupportedException, \
    ProtoExecutionLimitException
from . import common
from . import exceptions
from . import structural
from .common import Policy, DEFAULT_POLICY
from .rules import RulePlan, FilterRule, ConditionalFilterRule, ComparatorRule, KeyRule, EMPTY_PLAN
from .cursor import QueryCursor, StreamingCursor, BufferedCursor, open_cursor
from .structural import deep_equal, match_values
from .fields import F, Field, Predicate
from .interactive import InteractiveQuery
from .linq import Queryable, from_collection
