import logging
from typing import Any, Dict, List, Optional, Union

from lxml import etree  # Using lxml for strict parsing and namespace handling

logger = logging.getLogger(__name__)

# Namespaces a written urlset may use
SITEMAP_NS = {
    'sm': 'http://www.sitemaps.org/schemas/sitemap/0.9',
    'xhtml': 'http://www.w3.org/1999/xhtml',
    'image': 'http://www.google.com/schemas/sitemap-image/1.1',
    'news': 'http://www.google.com/schemas/sitemap-news/0.9',
}

IMAGE_FIELDS = {
    'loc': 'location',
    'caption': 'caption',
    'geo_location': 'geo_location',
    'title': 'title',
    'license': 'license',
}


def _child_text(element: etree._Element, path: str) -> Optional[str]:
    child = element.find(path, SITEMAP_NS)
    if child is None:
        return None
    return (child.text or "").strip()


class SitemapParser:
    def __init__(self):
        logger.debug("SitemapParser initialized.")

    def parse_sitemap(self, xml_content: Union[str, bytes], sitemap_url: str = "") -> Dict[str, Any]:
        """
        Parses a sitemap urlset, including News, Image and alternate link data.

        Parsing is strict: a document that is not well-formed XML is reported
        as an error rather than partially recovered.

        Args:
            xml_content: The XML content of the sitemap, as str or bytes.
            sitemap_url: Where the sitemap came from (for logging/context).

        Returns:
            A dictionary with:
                'type': 'urlset' or 'error'
                'urls': A list of URL dictionaries, None on error.
                'namespaces': prefix -> URI declared on the root element.
                'error_message': A string describing the error, if any.
        """
        if not xml_content:
            logger.error(f"Cannot parse empty XML content (from {sitemap_url}).")
            return {"type": "error", "urls": None, "namespaces": {}, "error_message": "Empty XML content"}

        if isinstance(xml_content, str):
            xml_content = xml_content.encode('utf-8')

        try:
            parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False)
            root = etree.fromstring(xml_content, parser=parser)
        except etree.XMLSyntaxError as e:
            logger.error(f"XML syntax error while parsing sitemap from {sitemap_url}: {e}")
            return {"type": "error", "urls": None, "namespaces": {}, "error_message": f"XMLSyntaxError: {e}"}

        namespaces = {prefix or '': uri for prefix, uri in root.nsmap.items()}
        root_tag_name = etree.QName(root.tag).localname
        if root_tag_name != 'urlset':
            msg = f"Unexpected root element '{root.tag}' in {sitemap_url}."
            logger.error(msg)
            return {"type": "error", "urls": None, "namespaces": namespaces, "error_message": msg}

        logger.info(f"Parsing as URL set: {sitemap_url}")
        page_urls = self._extract_urls_from_urlset(root)
        return {"type": "urlset", "urls": page_urls, "namespaces": namespaces, "error_message": None}

    def _extract_news(self, url_element: etree._Element) -> Optional[Dict[str, Optional[str]]]:
        news_el = url_element.find('news:news', SITEMAP_NS)
        if news_el is None:
            return None
        return {
            'name': _child_text(news_el, 'news:publication/news:name'),
            'language': _child_text(news_el, 'news:publication/news:language'),
            'genres': _child_text(news_el, 'news:genres'),
            'publication_date': _child_text(news_el, 'news:publication_date'),
            'title': _child_text(news_el, 'news:title'),
            'keywords': _child_text(news_el, 'news:keywords'),
        }

    def _extract_images(self, url_element: etree._Element) -> List[Dict[str, str]]:
        images = []
        for image_el in url_element.findall('image:image', SITEMAP_NS):
            image = {}
            for tag, key in IMAGE_FIELDS.items():
                value = _child_text(image_el, f'image:{tag}')
                if value is not None:
                    image[key] = value
            images.append(image)
        return images

    def _extract_alternates(self, url_element: etree._Element) -> List[Dict[str, Optional[str]]]:
        return [
            {'href': link.get('href'), 'media': link.get('media')}
            for link in url_element.findall('xhtml:link', SITEMAP_NS)
            if link.get('rel') == 'alternate'
        ]

    def _extract_urls_from_urlset(self, root_element: etree._Element) -> List[Dict[str, Any]]:
        """Extracts URL entries from a urlset element."""
        url_entries = []
        for url_element in root_element.findall('sm:url', SITEMAP_NS):
            loc = _child_text(url_element, 'sm:loc')
            if not loc:
                # A URL entry without a <loc> is invalid according to sitemap protocol, skip it.
                logger.warning(f"Skipping URL entry without <loc> tag. Context: {etree.tostring(url_element).decode()[:200]}")
                continue

            url_entries.append({
                'loc': loc,
                'lastmod': _child_text(url_element, 'sm:lastmod'),
                'changefreq': _child_text(url_element, 'sm:changefreq'),
                'priority': _child_text(url_element, 'sm:priority'),
                'news': self._extract_news(url_element),
                'images': self._extract_images(url_element),
                'alternates': self._extract_alternates(url_element),
            })
        logger.debug(f"Extracted {len(url_entries)} URL entries from urlset.")
        return url_entries
