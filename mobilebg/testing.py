"""
mobile.bg results-page markup builders used by the test modules.
"""


START_URL = "https://www.mobile.bg/obiavi/avtomobili-dzhipove?price=7000&price1=15000"
PARAMS_A = "2012 г., 120000 км, дизелов, 150 к.с., 1900 куб.см, автоматична, седан"


def item_html(
    href="//www.mobile.bg/obiava-11111111111111111-bmw-320",
    title="BMW 320 d",
    price="12 500 лв.",
    params=PARAMS_A,
    description="Колата е с пълна сервизна история.",
    item_class="item",
    seller=False,
):
    """One results-page listing laid out like mobile.bg's list view."""
    seller_html = '<div class="seller"><a href="/dealer">Авто Център</a></div>' if seller else ""
    return (
        f'<div class="{item_class}">'
        f'<div class="photo"><img src="//cdn.mobile.bg/photo.webp"></div>'
        f'<div class="text">'
        f'<div class="zaglavie"><a href="{href}" class="title saveSlink">{title}</a></div>'
        f'<div class="price">{price}<br>6 391 EUR</div>'
        f'<div class="params">{params}</div>'
        f'<div class="info">{description}</div>'
        f'{seller_html}'
        f'</div>'
        f'</div>'
    )


def page_html(*items, next_href=None):
    """A results page with the given listings and an optional paging link."""
    paging = ""
    if next_href is not None:
        paging = f'<div class="pagination"><a class="saveSlink next" href="{next_href}"><span>Напред</span></a></div>'
    return (
        '<html><head><meta charset="windows-1251"></head><body>'
        '<div class="list">' + "".join(items) + "</div>" + paging + "</body></html>"
    )
