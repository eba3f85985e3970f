"""cygpm - Cygwin 风格的软件包管理客户端"""

__version__ = "0.3.0"
