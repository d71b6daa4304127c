"""Hand-written stand-ins for AWS adapters and the data store."""

from __future__ import annotations

from botocore.exceptions import ClientError

from awsbroker.core.errors import NotFoundError

ACCOUNT_ID = "123456654321"
BROKER_ID = "awsservicebroker"

SQS_TEMPLATE = b"""\
AWSTemplateFormatVersion: "2010-09-09"
Description: Amazon SQS queue
Metadata:
  AWS::ServiceBroker::Specification:
    Version: 1.0
    Tags: [AWS, SQS]
    DisplayName: Amazon SQS
    LongDescription: Managed message queues
    Bindable: true
    ServicePlans:
      standard:
        DisplayName: Standard
        Description: Standard queue
        ParameterValues:
          FifoQueue: "false"
      fifo:
        Description: FIFO queue
        Cost: https://aws.amazon.com/sqs/pricing/
        ParameterValues:
          FifoQueue: "true"
Parameters:
  FifoQueue:
    Type: String
    AllowedValues: ["true", "false"]
  DelaySeconds:
    Type: Number
    Default: 0
  QueueLabel:
    Type: String
    Description: Label for the queue
Resources:
  Queue:
    Type: AWS::SQS::Queue
    Properties:
      FifoQueue: !Ref FifoQueue
      QueueName: !Sub "${AWS::StackName}-queue"
Outputs:
  QueueUrl:
    Value: !Ref Queue
  QueueArn:
    Value: !GetAtt Queue.Arn
"""


class Body:
    def __init__(self, data: bytes):
        self.data = data
        self.closed = False

    def read(self) -> bytes:
        return self.data

    def close(self) -> None:
        self.closed = True


class StubS3:
    """S3Client stand-in serving templates from a dict of key -> (body, marker)."""

    def __init__(self, objects: dict | None = None):
        self.objects: dict[str, tuple[bytes | None, str]] = dict(objects or {})
        self.gets: list[str] = []
        self.bodies: list[Body] = []
        self.list_error: Exception | None = None

    def list_objects(self, bucket: str, prefix: str) -> list[dict]:
        if self.list_error is not None:
            raise self.list_error
        return [
            {"Key": key, "LastModified": marker}
            for key, (_, marker) in self.objects.items()
            if key.startswith(prefix)
        ]

    def get_object(self, bucket: str, key: str) -> dict:
        self.gets.append(key)
        data, _ = self.objects[key]
        if data is None:
            return {}
        body = Body(data)
        self.bodies.append(body)
        return {"Body": body}


class StubStore:
    """In-memory DataStore."""

    def __init__(self):
        self.services: dict = {}
        self.instances: dict = {}
        self.bindings: dict = {}
        self.params: dict = {}

    def put_service_definition(self, sd):
        self.services[sd.id] = sd

    def get_service_definition(self, service_id):
        return self.services.get(service_id)

    def put_service_instance(self, si):
        self.instances[si.id] = si

    def get_service_instance(self, instance_id):
        return self.instances.get(instance_id)

    def delete_service_instance(self, instance_id):
        self.instances.pop(instance_id, None)

    def put_service_binding(self, sb):
        self.bindings[sb.id] = sb

    def get_service_binding(self, binding_id):
        return self.bindings.get(binding_id)

    def delete_service_binding(self, binding_id):
        self.bindings.pop(binding_id, None)

    def get_param(self, name):
        if name not in self.params:
            raise NotFoundError(f"param {name} not found")
        return self.params[name]

    def put_param(self, name, value):
        self.params[name] = value


class StubDynamo:
    """Low-level DynamoDB client keeping items keyed by (id, userid)."""

    def __init__(self):
        self.items: dict[tuple[str, str], dict] = {}
        self.tables: set[str] = set()

    @staticmethod
    def _k(key: dict) -> tuple[str, str]:
        return key["id"]["S"], key["userid"]["S"]

    def put_item(self, TableName, Item):
        self.tables.add(TableName)
        self.items[self._k(Item)] = Item

    def get_item(self, TableName, Key, ConsistentRead=False):
        item = self.items.get(self._k(Key))
        return {"Item": item} if item else {}

    def delete_item(self, TableName, Key):
        self.items.pop(self._k(Key), None)


class StubCfnApi:
    """Low-level CloudFormation client with an in-memory stack table."""

    def __init__(self):
        self.created: list[dict] = []
        self.deleted: list[str] = []
        self.stacks: dict[str, dict] = {}

    def create_stack(self, **kwargs):
        stack_id = f"arn:aws:cloudformation:us-east-1:{ACCOUNT_ID}:stack/{kwargs['StackName']}/1"
        self.created.append(kwargs)
        self.stacks[stack_id] = {"StackId": stack_id, "StackStatus": "CREATE_IN_PROGRESS"}
        return {"StackId": stack_id}

    def describe_stacks(self, StackName):
        if StackName not in self.stacks:
            raise ClientError(
                {
                    "Error": {
                        "Code": "ValidationError",
                        "Message": f"Stack with id {StackName} does not exist",
                    }
                },
                "DescribeStacks",
            )
        return {"Stacks": [self.stacks[StackName]]}

    def delete_stack(self, StackName):
        self.deleted.append(StackName)
        self.stacks[StackName]["StackStatus"] = "DELETE_IN_PROGRESS"


class StubSsmApi:
    """Low-level SSM client serving parameters from a dict."""

    def __init__(self, params: dict | None = None):
        self.params = dict(params or {})
        self.requests: list[tuple[str, bool]] = []

    def get_parameter(self, Name, WithDecryption=False):
        self.requests.append((Name, WithDecryption))
        if Name not in self.params:
            raise ClientError(
                {"Error": {"Code": "ParameterNotFound", "Message": Name}}, "GetParameter"
            )
        return {"Parameter": {"Name": Name, "Value": self.params[Name]}}
