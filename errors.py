class ArticleError(Exception):
    pass


class ParseFailure(ArticleError):
    pass


class EmptyArticle(ArticleError):
    pass


class UnsupportedBodyKind(ArticleError):
    pass


class ArticleNotFound(ArticleError):
    pass


class UnsupportedRenderMode(ArticleError):
    pass
