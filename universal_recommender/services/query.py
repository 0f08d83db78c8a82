import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional

from universal_recommender.constants.app_constants import AppConstants
from universal_recommender.constants.app_message import AppMessage
from universal_recommender.model.query_model import Condition, QueryPayload

"""
================================================================================
Query – Usage Guide
================================================================================
A query is composable. The values given for one field within one call are
ORed; separate conditions are ANDed, including repeated calls on one field.

    # items where `field` contains `a` OR `b`
    query.where(field=['a', 'b'])

    # items where `field` contains `a` AND `b`
    query.where(field='a').where(field='b')

    # items where `field` contains (`a` OR `b`) AND (`c` OR `d`)
    query.where(field=['a', 'b']).where(field=['c', 'd'])

Conditions are never merged or deduplicated. Be mindful of the rules you
stack up: a filter that matches nothing removes every recommendation.

    query = (engine.query()
             .for_user(1)
             .where(distribution_channel=1, territory_ids=[1, 2, 3])
             .not_(price_ranges='Comp')
             .boost(1.5, category_ids=[1]))

Field names that are not Python identifiers can be passed as a mapping:

    query.where({'release-year': 2020})
================================================================================
"""

logger = logging.getLogger(__name__)


class InvalidBiasError(ValueError):
    pass


class Query:
    """
    Builder for Universal Recommender queries. Iterating a query executes it
    against its engine; every iteration issues a new request.
    """

    def __init__(self, engine=None):
        self.engine = engine
        self._user: Optional[str] = None
        self._item: Optional[str] = None
        self._limit: Optional[int] = None
        self._fields: List[Condition] = []

    def for_user(self, user: Any) -> 'Query':
        """Personalize recommendations to a specific user."""
        self._user = str(user)
        return self

    def limit(self, limit: int) -> 'Query':
        """Change the number of recommendations returned."""
        self._limit = limit
        return self

    def similar_to(self, item: Any) -> 'Query':
        """Limit to items which are behaviorally similar to another item."""
        self._item = str(item)
        return self

    def where(self, conditions: Optional[Mapping[Any, Any]] = None, /, **kwargs: Any) -> 'Query':
        """
        Include only items whose properties match.

        Args:
            conditions: field name -> value or list of values
            **kwargs: same as ``conditions``, appended after them
        """
        return self._add_biases(AppConstants.WHERE_BIAS, conditions, kwargs)

    def not_(self, conditions: Optional[Mapping[Any, Any]] = None, /, **kwargs: Any) -> 'Query':
        """Exclude items whose properties match."""
        return self._add_biases(AppConstants.NOT_BIAS, conditions, kwargs)

    exclude = not_

    def boost(self, amount: float, conditions: Optional[Mapping[Any, Any]] = None, /, **kwargs: Any) -> 'Query':
        """
        Boost items whose properties match.

        Raises:
            InvalidBiasError: If amount is not greater than 1.0
        """
        if not amount > 1:
            raise InvalidBiasError(AppMessage.BOOST_AMOUNT_INVALID)
        return self._add_biases(amount, conditions, kwargs)

    def deboost(self, amount: float, conditions: Optional[Mapping[Any, Any]] = None, /, **kwargs: Any) -> 'Query':
        """
        Deboost items whose properties match.

        Raises:
            InvalidBiasError: If amount is not strictly between 0.0 and 1.0
        """
        if not 0 < amount < 1:
            raise InvalidBiasError(AppMessage.DEBOOST_AMOUNT_INVALID)
        return self._add_biases(amount, conditions, kwargs)

    @property
    def fields(self) -> List[Condition]:
        return list(self._fields)

    def payload(self) -> QueryPayload:
        return QueryPayload(
            user=self._user,
            item=self._item,
            num=self._limit,
            fields=list(self._fields),
        )

    def query_hash(self) -> Dict[str, Any]:
        """Returns a dict representing the query, without unset keys."""
        return self.payload().to_dict()

    def __iter__(self) -> Iterator[Any]:
        if self.engine is None:
            raise ValueError(AppMessage.QUERY_ENGINE_MISSING)
        return iter(self.engine.execute_query(self))

    def __repr__(self) -> str:
        return f"Query({self.query_hash()!r})"

    def _add_biases(self, bias: float, conditions: Optional[Mapping[Any, Any]],
                    kwargs: Dict[str, Any]) -> 'Query':
        for source in (conditions or {}, kwargs):
            for field, values in source.items():
                condition = Condition(name=field, values=values, bias=float(bias))
                logger.debug("Adding condition %s", condition)
                self._fields.append(condition)
        return self
