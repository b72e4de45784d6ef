"""X (Twitter) media upload node."""

from typing import List

from ..client.http_gateway import HTTPGateway
from ..config import load_x_credentials
from ..models import NodeExecutionItem
from ..social.x_client import XMediaClient
from .base import BaseNode, NodeDescription, NodeExecutionContext
from .parameters import INPUT_PARAMETERS

X_CREDENTIAL = "twitterOAuth2Api"


class XMediaUploadNode(BaseNode):
    """Uploads a video to X and returns its media id."""

    description = NodeDescription(
        display_name="XMediaUpload",
        name="xMediaUpload",
        description="Upload Video to X.com",
        credential=X_CREDENTIAL,
        parameters=list(INPUT_PARAMETERS),
    )

    media_type = "mp4"

    def create_x_client(self, access_token: str) -> XMediaClient:
        return XMediaClient(access_token)

    async def execute(self, context: NodeExecutionContext) -> List[NodeExecutionItem]:
        credentials = load_x_credentials(context.credentials.get(X_CREDENTIAL))
        x_client = self.create_x_client(credentials.access_token)

        settings = context.get_settings()
        async with HTTPGateway(timeout=settings.request_timeout_seconds) as gateway:
            buffer = await self.create_input_provider(gateway, context).get_buffer()

        uploaded = await x_client.upload_media(buffer, media_type=self.media_type)
        return [NodeExecutionItem(json={"media": uploaded["media_id"]})]
