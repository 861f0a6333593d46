import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from app.core.config import settings
from app.core.errors import NotFound, PersistenceFailure

logger = logging.getLogger(__name__)

# Table key schema: user_id (partition) + id (sort)
OWNER_KEY = "user_id"
ID_KEY = "id"

# Both key attributes must already exist, so update/delete never create items
_EXISTS_CONDITION = "attribute_exists(#pk) AND attribute_exists(#sk)"
_KEY_NAMES = {"#pk": OWNER_KEY, "#sk": ID_KEY}


def get_transactions_table():
    dynamodb = boto3.resource(
        "dynamodb",
        region_name=settings.DYNAMO_REGION,
        endpoint_url=settings.DYNAMO_ENDPOINT_URL,
    )
    return dynamodb.Table(settings.DYNAMO_TRANSACTIONS_TABLE)


class DynamoTransactionStore:
    """
    DynamoDB-backed ledger store.

    Every read and write is keyed on (user_id, id), so a transaction owned by
    another user behaves exactly like a missing one. Writes are single
    conditional requests; DynamoDB applies each atomically.
    """

    def __init__(self, table=None):
        self.table = table if table is not None else get_transactions_table()

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        item = _convert_for_dynamo(record)
        try:
            self.table.put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(#sk)",
                ExpressionAttributeNames={"#sk": ID_KEY},
            )
        except ClientError as e:
            raise _persistence_failure("create transaction", e) from e
        # same number types a later read returns
        return _from_dynamo(item)

    def select_by_owner(
        self,
        owner_id: str,
        type: Optional[str] = None,
        category: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Query the owner's partition. Filters run server side; ordering by date
        happens here because the sort key is the opaque id.
        """
        query_kwargs: Dict[str, Any] = {"KeyConditionExpression": Key(OWNER_KEY).eq(owner_id)}

        conditions = []
        if type:
            conditions.append(Attr("type").eq(type))
        if category:
            conditions.append(Attr("category").eq(category))
        if start_date:
            conditions.append(Attr("date").gte(start_date))
        if end_date:
            conditions.append(Attr("date").lte(end_date))
        if conditions:
            filter_expression = conditions[0]
            for condition in conditions[1:]:
                filter_expression = filter_expression & condition
            query_kwargs["FilterExpression"] = filter_expression

        items: List[Dict[str, Any]] = []
        try:
            while True:
                response = self.table.query(**query_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as e:
            raise _persistence_failure("fetch transactions", e) from e

        records = [_from_dynamo(item) for item in items]
        records.sort(key=lambda r: (r.get("date", ""), r.get("created_at", "")), reverse=True)
        return records

    def select_one(self, transaction_id: str, owner_id: str) -> Dict[str, Any]:
        try:
            response = self.table.get_item(Key={OWNER_KEY: owner_id, ID_KEY: transaction_id})
        except ClientError as e:
            raise _persistence_failure("fetch transaction", e) from e

        item = response.get("Item")
        if not item:
            raise NotFound()
        return _from_dynamo(item)

    def update(self, transaction_id: str, owner_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update. Returns the updated item; an empty patch just
        returns the current one.
        """
        if not patch:
            return self.select_one(transaction_id, owner_id)

        update_expression_parts = []
        expression_attribute_values = {}
        expression_attribute_names = dict(_KEY_NAMES)

        for idx, (key, value) in enumerate(patch.items()):
            placeholder = f"#f{idx}"
            value_placeholder = f":v{idx}"
            update_expression_parts.append(f"{placeholder} = {value_placeholder}")
            expression_attribute_names[placeholder] = key
            expression_attribute_values[value_placeholder] = value

        update_expression = "SET " + ", ".join(update_expression_parts)

        try:
            response = self.table.update_item(
                Key={OWNER_KEY: owner_id, ID_KEY: transaction_id},
                UpdateExpression=update_expression,
                ConditionExpression=_EXISTS_CONDITION,
                ExpressionAttributeNames=expression_attribute_names,
                ExpressionAttributeValues=_convert_for_dynamo(expression_attribute_values),
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if _is_condition_failure(e):
                raise NotFound() from e
            raise _persistence_failure("update transaction", e) from e

        return _from_dynamo(response.get("Attributes", {}))

    def delete(self, transaction_id: str, owner_id: str) -> Dict[str, Any]:
        try:
            response = self.table.delete_item(
                Key={OWNER_KEY: owner_id, ID_KEY: transaction_id},
                ConditionExpression=_EXISTS_CONDITION,
                ExpressionAttributeNames=dict(_KEY_NAMES),
                ReturnValues="ALL_OLD",
            )
        except ClientError as e:
            if _is_condition_failure(e):
                raise NotFound() from e
            raise _persistence_failure("delete transaction", e) from e

        return _from_dynamo(response.get("Attributes", {}))

    def ping(self) -> None:
        """Raise PersistenceFailure if the table cannot be read."""
        try:
            self.table.scan(Limit=1)
        except ClientError as e:
            raise _persistence_failure("reach transactions table", e) from e


def _is_condition_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


def _persistence_failure(action: str, error: ClientError) -> PersistenceFailure:
    message = error.response.get("Error", {}).get("Message", str(error))
    logger.error(f"Failed to {action}: {message}")
    return PersistenceFailure(f"Failed to {action}: {message}")


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal for DynamoDB compatibility.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_for_dynamo(v) for v in obj]
    return obj


def _from_dynamo(obj: Any):
    """
    Recursively convert Decimal instances back to native Python numeric types.
    """
    if isinstance(obj, list):
        return [_from_dynamo(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj
