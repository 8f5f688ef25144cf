"""项目内使用的自定义异常定义。"""


class ImageShrinkError(Exception):
    """基础异常类型。"""


class ConfigurationError(ImageShrinkError):
    """缺少 API 凭证等配置问题时抛出。"""


class CompressionError(ImageShrinkError):
    """远程压缩服务相关错误的基类。"""


class UploadError(CompressionError):
    """上传 (/shrink) 返回非 2xx 或缺少 Location 头时抛出。"""


class DownloadError(CompressionError):
    """下载压缩结果失败时抛出。"""


class EncodingError(ImageShrinkError):
    """源图片无法解码或重新编码。"""


class OutputWriteError(ImageShrinkError):
    """输出写入失败。"""


class UnrecoverableSetupError(ImageShrinkError):
    """输入/输出目录无法使用，整批任务无法开始。"""
