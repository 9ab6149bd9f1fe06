"""Stock product copy for canvas listings."""

from typing import Optional

DEFAULT_CANVAS_DESCRIPTION = """<p><strong>Canvas Info</strong></p>
<p> With a variety of sizes available, our matte canvases are built with a patented, solid support face, guaranteeing durability and preventing sagging or stretching over time. The corners and edges of our canvases are perfectly folded, creating a seamless and polished appearance that adds elegance to your space.</p>

<p>🐾 Materials: cotton and polyester composite (canvas), pine wood (frame)</p>
<p>🐾 Unique coating: produces the highest quality images using UL-certified Greenguard Gold inks</p>
<p>🐾 Latex inks: canvases are printed using latex inks that are non-hazardous, non-toxic, non-flammable</p>
<p>🐾 Back hanging included</p>
<p>🐾 Two rubber dots: ensure the canvas stays in place when hung</p>
<p>🐾 Sustainable product: the canvas prints are stretched on our proprietary profile radial pine produced from use wood from FSC certified renewable forests</p>

<p><strong>Processing and Shipping Times</strong></p>

<p>🐾 Please allow 3-6 business days for your order to be processed and made</p>
<p>🐾 Standard shipping takes 3-8 days</p>
<p>🐾 Please note that these times are estimated by the mail service and may take longer</p>
<p>🐾 Please make sure your shipping address is correct before placing an order</p>
<p>🐾 Printed to order and shipped to most countries in the world.</p>

<p><strong>Returns & Exchanges</strong></p>

<p>🐾 In case of a return, the buyer is responsible for the shipping cost.</p>
<p>🐾 We will refund or re-print your item if it arrives damaged.</p>
<p>🐾 If your item arrives damaged, please contact us within 2 weeks of receiving the item.</p>"""


def description_or_default(description: Optional[str]) -> str:
    """The given description, or the stock canvas copy when it is blank."""
    return description if (description or "").strip() else DEFAULT_CANVAS_DESCRIPTION
