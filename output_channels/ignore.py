from output_channels.base import BaseOutputChannel


class IgnoreChannel(BaseOutputChannel):
    channel_name = "ignore"

    async def _handle_buffered(self, outputs, exit_code):
        pass

    async def _handle_realtime(self, stream, chunk):
        pass
