"""
Akamai 参数解析测试

测试三种 legacy 编码：
- im=Resize=width:400,height:300
- im.resize.width=400
- imwidth=400

运行测试：
    cd backend
    pytest tests/test_parser.py -v
"""

import pytest

from akamai_compat.errors import MalformedTokenError
from akamai_compat.models import NeutralParameter, ParameterSource
from akamai_compat.parser import AkamaiParser, split_pair, split_tokens, url_of
from conftest import url


@pytest.fixture
def parser():
    return AkamaiParser()


def names_values(parameters):
    return [(p.name, p.value) for p in parameters]


# ============================================
# 1. 基础工具函数
# ============================================

class TestSplitTokens:
    """split_tokens 测试"""

    def test_comma_and_semicolon(self):
        assert split_tokens("a=1,b=2;c=3") == ["a=1", "b=2", "c=3"]

    def test_parentheses_kept_together(self):
        assert split_tokens("AspectCrop=(16,9),xPosition=.5") == ["AspectCrop=(16,9)", "xPosition=.5"]

    def test_empty_tokens_dropped(self):
        assert split_tokens(" a=1 ,, ;b=2, ") == ["a=1", "b=2"]


class TestSplitPair:
    """split_pair 测试"""

    def test_equals(self):
        assert split_pair("width=400") == ("width", "400")

    def test_colon(self):
        assert split_pair("width:400") == ("width", "400")

    def test_first_separator_wins(self):
        assert split_pair("Resize=width:400") == ("Resize", "width:400")

    def test_bare_word(self):
        assert split_pair("Grayscale") == ("Grayscale", None)

    @pytest.mark.parametrize("token", ["=400", "width=", "crop=(1,2", "crop=1,2)"])
    def test_malformed(self, token):
        with pytest.raises(MalformedTokenError):
            split_pair(token)

    def test_malformed_is_value_error(self):
        with pytest.raises(ValueError):
            split_pair(":x")


class TestUrlOf:

    def test_string(self):
        assert url_of("/a.jpg?imwidth=1") == "/a.jpg?imwidth=1"

    def test_request_like(self):
        class Request:
            url = "/a.jpg?imwidth=1"

        assert url_of(Request()) == "/a.jpg?imwidth=1"

    def test_unsupported(self):
        with pytest.raises(TypeError):
            url_of(42)


# ============================================
# 2. im= 复合参数
# ============================================

class TestCompositeParameter:
    """im= 复合参数测试"""

    def test_resize_with_arguments(self, parser):
        """测试：im=resize=width:100,height:200"""
        parameters = parser.parse(url("im=resize=width:100,height:200"))

        assert names_values(parameters) == [("resize.width", "100"), ("resize.height", "200")]
        assert all(p.source == ParameterSource.LEGACY_SHORT for p in parameters)

    def test_transform_name_case_insensitive(self, parser):
        parameters = parser.parse(url("im=Resize=Width:100"))
        assert names_values(parameters) == [("resize.width", "100")]

    def test_positional_arguments(self, parser):
        """测试：AspectCrop=(16,9)"""
        parameters = parser.parse(url("im=AspectCrop=(16,9),xPosition=.5,yPosition=.25"))

        assert names_values(parameters) == [
            ("aspectcrop.width", "16"),
            ("aspectcrop.height", "9"),
            ("aspectcrop.xposition", ".5"),
            ("aspectcrop.yposition", ".25"),
        ]

    def test_bare_transform(self, parser):
        parameters = parser.parse(url("im=Grayscale"))
        assert names_values(parameters) == [("grayscale", True)]

    def test_single_valued_transform_ends_context(self, parser):
        """测试：Rotate=90 之后的 width 不属于 rotate"""
        parameters = parser.parse(url("im=Rotate=90,width=300"))
        assert names_values(parameters) == [("rotate", "90"), ("width", "300")]

    def test_plain_key_values(self, parser):
        parameters = parser.parse(url("im=width=300;quality=80"))
        assert names_values(parameters) == [("width", "300"), ("quality", "80")]

    def test_argument_outside_transform_context(self, parser):
        """测试：不属于当前 transform 的参数按普通名字处理"""
        parameters = parser.parse(url("im=Resize=width:100,quality:80"))
        assert names_values(parameters) == [("resize.width", "100"), ("quality", "80")]

    def test_malformed_token_skipped(self, parser):
        """测试：坏 token 被跳过，其余参数保留"""
        parameters = parser.parse(url("im=width=300,=bad,bogus,height=200"))
        assert names_values(parameters) == [("width", "300"), ("height", "200")]

    def test_unclosed_parenthesis_skipped(self, parser):
        parameters = parser.parse(url("im=width=300,Crop=(10,20"))
        assert names_values(parameters) == [("width", "300")]


# ============================================
# 3. im.* 点号参数
# ============================================

class TestDotParameter:
    """im.* 参数测试"""

    def test_full_path(self, parser):
        parameters = parser.parse(url("im.resize.width=400"))

        assert names_values(parameters) == [("resize.width", "400")]
        assert parameters[0].source == ParameterSource.LEGACY_DOT

    def test_path_lowercased(self, parser):
        parameters = parser.parse(url("im.aspectCrop.width=16"))
        assert names_values(parameters) == [("aspectcrop.width", "16")]

    def test_pair_value(self, parser):
        parameters = parser.parse(url("im.resize=width:400,height:300"))
        assert names_values(parameters) == [("resize.width", "400"), ("resize.height", "300")]

    def test_positional_value(self, parser):
        parameters = parser.parse(url("im.aspectCrop=(4,3)"))
        assert names_values(parameters) == [("aspectcrop.width", "4"), ("aspectcrop.height", "3")]

    def test_single_value(self, parser):
        parameters = parser.parse(url("im.crop=100,100,200,200"))
        assert names_values(parameters) == [("crop", "100,100,200,200")]

    def test_malformed_name_skipped(self, parser):
        parameters = parser.parse(url("im..width=1&im.=2&imwidth=300"))
        assert names_values(parameters) == [("imwidth", "300")]

    def test_malformed_pair_skipped(self, parser):
        parameters = parser.parse(url("im.resize=width:400,height"))
        assert names_values(parameters) == [("resize.width", "400")]


# ============================================
# 4. flat legacy 参数 + 顺序
# ============================================

class TestNamedParameter:
    """imwidth 等参数测试"""

    def test_named(self, parser):
        parameters = parser.parse(url("imwidth=400&impolicy=Letterbox"))

        assert parameters == [
            NeutralParameter("imwidth", "400", ParameterSource.LEGACY_NAMED),
            NeutralParameter("impolicy", "Letterbox", ParameterSource.LEGACY_NAMED),
        ]

    def test_unrelated_parameters_ignored(self, parser):
        assert parser.parse(url("width=400&v=2")) == []

    def test_input_order_preserved(self, parser):
        """测试：输出顺序 = 输入顺序"""
        parameters = parser.parse(url("imwidth=100&im.resize.width=300&im=quality=80"))
        assert [p.name for p in parameters] == ["imwidth", "resize.width", "quality"]

    def test_request_object(self, parser):
        class Request:
            def __init__(self, url):
                self.url = url

        parameters = parser.parse(Request(url("imheight=50")))
        assert names_values(parameters) == [("imheight", "50")]


# ============================================
# 5. 路径参数、叠加层、条件
# ============================================

class TestPathSegments:
    """/im-.../ 和 /im(...)/ 路径参数测试"""

    def test_dash_form(self, parser):
        parameters = parser.parse("https://images.example.com/images/im-resize=width:200/cat.jpg")

        assert names_values(parameters) == [("resize.width", "200")]
        assert parameters[0].source == ParameterSource.LEGACY_DOT

    def test_group_form(self, parser):
        parameters = parser.parse("https://images.example.com/im(resize=width:800,height:600,mode:fit)/cat.jpg")
        assert names_values(parameters) == [
            ("resize.width", "800"),
            ("resize.height", "600"),
            ("resize.mode", "fit"),
        ]

    def test_path_before_query(self, parser):
        parameters = parser.parse("https://images.example.com/im-resize=width:200/cat.jpg?imwidth=400")
        assert [p.name for p in parameters] == ["resize.width", "imwidth"]


class TestOverlayAndCondition:
    """im.composite / im.watermark / im.if-dimension 测试"""

    def test_composite_pairs(self, parser):
        parameters = parser.parse(url("im.composite=url:https://x/logo.png,placement:southeast"))
        assert names_values(parameters) == [
            ("composite.url", "https://x/logo.png"),
            ("composite.placement", "southeast"),
        ]

    def test_bare_url_kept_whole(self, parser):
        """测试：值本身是 URL 时不按 key:value 拆分"""
        parameters = parser.parse(url("im.watermark=https://x/logo.png"))
        assert names_values(parameters) == [("watermark", "https://x/logo.png")]

    def test_composite_in_im_value(self, parser):
        parameters = parser.parse(url("im=Composite=url:https://x/logo.png,opacity:50"))
        assert names_values(parameters) == [
            ("composite.url", "https://x/logo.png"),
            ("composite.opacity", "50"),
        ]

    def test_if_dimension_kept_raw(self, parser):
        parameters = parser.parse(url("im.if-dimension=width>1000,im.resize=width:800"))
        assert names_values(parameters) == [("if-dimension", "width>1000,im.resize=width:800")]
