from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

from seatadmin.config import Settings

# DynamoDB caps TransactWriteItems at 100 actions per call
TRANSACTION_LIMIT = 100

_serializer = TypeSerializer()


def serialize(item: Dict[str, Any]) -> Dict[str, Any]:
    """Plain values -> low-level attribute values ({"S": ...}, {"N": ...})"""
    return {key: _serializer.serialize(value) for key, value in item.items()}


class DynamoDBClient:
    """Thin wrapper over one DynamoDB table keyed by ``pk``/``sk``.

    Every call returns a dict with a ``status`` of ``success``, ``not_found``
    or ``error``; callers decide how to surface errors.
    """

    def __init__(self, settings: Settings, table=None, client=None):
        self.table_name = settings.table_name
        self.aws_region = settings.aws_region

        if table is not None:
            # Pre-built table resource and low-level client (tests, shared sessions)
            self.table = table
            self.dynamodb = client
            return

        # Initialize DynamoDB client
        self.dynamodb = boto3.client(
            "dynamodb",
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=self.aws_region,
        )

        # Initialize DynamoDB resource for easier operations
        dynamodb_resource = boto3.resource(
            "dynamodb",
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=self.aws_region,
        )

        if self.table_name:
            self.table = dynamodb_resource.Table(self.table_name)
        else:
            self.table = None

    def put_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Put item into DynamoDB table"""
        try:
            response = self.table.put_item(Item=item)
            return {"status": "success", "response": response}
        except ClientError as e:
            return {"status": "error", "error": str(e)}

    def get_item(self, pk: str, sk: str) -> Dict[str, Any]:
        """Get item from DynamoDB table"""
        try:
            response = self.table.get_item(Key={"pk": pk, "sk": sk})
            if "Item" in response:
                return {"status": "success", "item": response["Item"]}
            return {"status": "not_found", "item": None}
        except ClientError as e:
            return {"status": "error", "error": str(e)}

    def delete_item(self, pk: str, sk: str) -> Dict[str, Any]:
        """Delete item, reporting whether it existed"""
        try:
            response = self.table.delete_item(
                Key={"pk": pk, "sk": sk}, ReturnValues="ALL_OLD"
            )
            if response.get("Attributes"):
                return {"status": "success", "item": response["Attributes"]}
            return {"status": "not_found", "item": None}
        except ClientError as e:
            return {"status": "error", "error": str(e)}

    def query_items(self, pk: str, sk_prefix: Optional[str] = None) -> Dict[str, Any]:
        """Query all items of a partition, following pagination"""
        query_kwargs = {"ExpressionAttributeValues": {":pk": pk}}
        if sk_prefix:
            query_kwargs["KeyConditionExpression"] = "pk = :pk AND begins_with(sk, :sk)"
            query_kwargs["ExpressionAttributeValues"][":sk"] = sk_prefix
        else:
            query_kwargs["KeyConditionExpression"] = "pk = :pk"

        try:
            items = []
            while True:
                response = self.table.query(ConsistentRead=True, **query_kwargs)
                items.extend(response["Items"])
                if "LastEvaluatedKey" not in response:
                    break
                query_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]
            return {"status": "success", "items": items, "count": len(items)}
        except ClientError as e:
            return {"status": "error", "error": str(e)}

    def scan_items(self, filter_expression: str = None,
                   expression_values: Dict[str, Any] = None) -> Dict[str, Any]:
        """Scan all items in the table with optional filter"""
        scan_kwargs = {}
        if filter_expression and expression_values:
            scan_kwargs["FilterExpression"] = filter_expression
            scan_kwargs["ExpressionAttributeValues"] = expression_values

        try:
            items = []
            while True:
                response = self.table.scan(**scan_kwargs)
                items.extend(response["Items"])
                if "LastEvaluatedKey" not in response:
                    break
                scan_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]
            return {"status": "success", "items": items, "count": len(items)}
        except ClientError as e:
            return {"status": "error", "error": str(e)}

    def update_item(self, pk: str, sk: str, update_expression: str,
                    expression_values: Dict[str, Any] = None,
                    expression_names: Dict[str, str] = None) -> Dict[str, Any]:
        """Update attributes of an item and return the new values"""
        update_kwargs = {
            "Key": {"pk": pk, "sk": sk},
            "UpdateExpression": update_expression,
            "ReturnValues": "ALL_NEW",
        }
        if expression_values:
            update_kwargs["ExpressionAttributeValues"] = expression_values
        if expression_names:
            update_kwargs["ExpressionAttributeNames"] = expression_names

        try:
            response = self.table.update_item(**update_kwargs)
            return {"status": "success", "item": response.get("Attributes", {})}
        except ClientError as e:
            return {"status": "error", "error": str(e)}

    def transact_write(self, transact_items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Execute a transactional write operation"""
        try:
            response = self.dynamodb.transact_write_items(
                TransactItems=transact_items
            )
            return {"status": "success", "response": response}
        except ClientError as e:
            return {"status": "error", "error": str(e)}

    def transact_write_all(self, transact_items: List[Dict[str, Any]],
                           rollback_items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Write any number of actions as transactions of TRANSACTION_LIMIT.

        Each transaction is atomic. If one fails, the transactions already
        committed are undone with ``rollback_items`` (one per action, same
        order) before the error is returned.
        """
        committed = 0
        for start in range(0, len(transact_items), TRANSACTION_LIMIT):
            chunk = transact_items[start:start + TRANSACTION_LIMIT]
            result = self.transact_write(chunk)
            if result["status"] == "error":
                if committed:
                    undo = self._rollback(rollback_items[:committed])
                    if undo["status"] == "error":
                        return {
                            "status": "error",
                            "error": f"{result['error']} (rollback failed: {undo['error']})",
                        }
                return result
            committed += len(chunk)
        return {"status": "success", "written": committed}

    def _rollback(self, rollback_items: List[Dict[str, Any]]) -> Dict[str, Any]:
        for start in range(0, len(rollback_items), TRANSACTION_LIMIT):
            result = self.transact_write(rollback_items[start:start + TRANSACTION_LIMIT])
            if result["status"] == "error":
                return result
        return {"status": "success"}

    def put_action(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Transaction action writing a whole item"""
        return {"Put": {"TableName": self.table_name, "Item": serialize(item)}}

    def delete_action(self, pk: str, sk: str) -> Dict[str, Any]:
        return {"Delete": {"TableName": self.table_name, "Key": serialize({"pk": pk, "sk": sk})}}

    def update_action(self, pk: str, sk: str, update_expression: str,
                      expression_values: Dict[str, Any],
                      expression_names: Dict[str, str] = None) -> Dict[str, Any]:
        """Transaction action updating an item that must already exist"""
        update = {
            "TableName": self.table_name,
            "Key": serialize({"pk": pk, "sk": sk}),
            "UpdateExpression": update_expression,
            "ConditionExpression": "attribute_exists(sk)",
            "ExpressionAttributeValues": serialize(expression_values),
        }
        if expression_names:
            update["ExpressionAttributeNames"] = expression_names
        return {"Update": update}

    def next_counter(self, name: str) -> Dict[str, Any]:
        """Atomically increment a named counter and return the new value"""
        result = self.update_item(
            "COUNTER",
            name,
            "ADD next_value :one",
            expression_values={":one": 1},
        )
        if result["status"] == "error":
            return result
        return {"status": "success", "value": int(result["item"]["next_value"])}
