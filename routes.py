import logging

from pydantic import ValidationError

from envelope import APIResponse
from errors import DecodeError, EncodeError
from filters import filter_alerts, filter_rule_groups
from models import AlertsData, RulesData
from tenant import must_label_value

logger = logging.getLogger("labelproxy.routes")


class Routes:
    """
    Envelope handlers for the filtered endpoints.

    The tenant value is resolved once per response, from the request
    the envelope was decoded for, and handed to the pure filters.
    """

    def __init__(self, label: str):
        self.label = label

    def rules(self, resp: APIResponse) -> None:
        try:
            data = RulesData.model_validate(resp.data)
        except ValidationError as e:
            raise DecodeError("can't decode rules data") from e

        lvalue = must_label_value(resp.context)
        filtered = filter_rule_groups(data.groups, self.label, lvalue)

        logger.debug(
            f"Kept {len(filtered)}/{len(data.groups)} rule groups for {self.label}={lvalue!r}"
        )

        try:
            resp.set_data(RulesData(groups=filtered))
        except EncodeError as e:
            raise EncodeError("can't set data") from e

    def alerts(self, resp: APIResponse) -> None:
        try:
            data = AlertsData.model_validate(resp.data)
        except ValidationError as e:
            raise DecodeError("can't decode alerts data") from e

        lvalue = must_label_value(resp.context)
        filtered = filter_alerts(data.alerts, self.label, lvalue)

        logger.debug(
            f"Kept {len(filtered)}/{len(data.alerts)} alerts for {self.label}={lvalue!r}"
        )

        try:
            resp.set_data(AlertsData(alerts=filtered))
        except EncodeError as e:
            raise EncodeError("can't set data") from e
