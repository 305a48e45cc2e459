"""
In-page probes run through ``driver.execute_script``.

Every probe is read-only and returns plain JSON (lists/dicts of strings,
numbers, booleans). Classification happens in Python on top of these raw
facts so it can be tested without a browser.
"""

# Shared helpers, prepended to every probe that returns element records.
_HELPERS = r"""
const uniqueId = (node) => {
  if (!node.id) return null;
  const sel = '#' + CSS.escape(node.id);
  return document.querySelectorAll(sel).length === 1 ? sel : null;
};
const selectorFor = (el) => {
  const parts = [];
  let node = el;
  while (node && node.nodeType === 1 && node !== document.documentElement) {
    const idSel = uniqueId(node);
    if (idSel) { parts.unshift(idSel); return parts.join(' > '); }
    let index = 1;
    let sib = node.previousElementSibling;
    while (sib) { if (sib.tagName === node.tagName) index++; sib = sib.previousElementSibling; }
    parts.unshift(node.tagName.toLowerCase() + ':nth-of-type(' + index + ')');
    node = node.parentElement;
  }
  parts.unshift('html');
  return parts.join(' > ');
};
const attrsOf = (el) => Object.fromEntries(Array.from(el.attributes).map(a => [a.name, a.value]));
const boxOf = (el) => {
  const r = el.getBoundingClientRect();
  return { x: r.x + window.scrollX, y: r.y + window.scrollY, width: r.width, height: r.height };
};
const recordOf = (el) => ({
  selector: selectorFor(el),
  tagName: el.tagName,
  text: (el.textContent || '').trim(),
  attributes: attrsOf(el),
  box: boxOf(el),
});
const LANDMARK_QUERY = 'header, nav, main, aside, footer, [role="banner"], [role="navigation"], ' +
  '[role="main"], [role="complementary"], [role="contentinfo"], [role="search"], [role="form"], [role="region"]';
"""

METADATA_SCRIPT = r"""
const meta = (name) => {
  const el = document.querySelector('meta[name="' + name + '"]');
  return el ? el.getAttribute('content') : null;
};
return {
  title: document.title || null,
  lang: document.documentElement.getAttribute('lang'),
  viewport: meta('viewport'),
  description: meta('description'),
  charset: document.characterSet || null,
};
"""

IMAGES_SCRIPT = _HELPERS + r"""
const images = [];
document.querySelectorAll('img').forEach((img) => {
  const r = img.getBoundingClientRect();
  const figure = img.closest('figure');
  const context = (figure && figure.textContent.trim()) ||
    (img.parentElement ? img.parentElement.textContent.trim() : '');
  images.push({
    src: img.currentSrc || img.src || img.getAttribute('src') || '',
    alt: img.getAttribute('alt'),
    selector: selectorFor(img),
    width: r.width,
    height: r.height,
    background: false,
    context: context,
  });
});
const seen = new Set();
document.querySelectorAll('div, section, header, main, aside, footer, [style*="background"]').forEach((el) => {
  if (seen.has(el)) return;
  seen.add(el);
  const bg = window.getComputedStyle(el).backgroundImage;
  if (!bg || bg === 'none' || bg.indexOf('url(') === -1) return;
  const match = bg.match(/url\(["']?([^"')]+)["']?\)/);
  if (!match) return;
  const r = el.getBoundingClientRect();
  images.push({
    src: match[1],
    alt: el.getAttribute('aria-label'),
    selector: selectorFor(el),
    width: r.width,
    height: r.height,
    background: true,
    context: (el.textContent || '').trim(),
  });
});
return images;
"""

HEADINGS_SCRIPT = _HELPERS + r"""
return Array.from(document.querySelectorAll('h1, h2, h3, h4, h5, h6')).map((h) => {
  const rec = recordOf(h);
  rec.level = parseInt(h.tagName.charAt(1), 10);
  return rec;
});
"""

LINKS_SCRIPT = _HELPERS + r"""
return Array.from(document.querySelectorAll('a[href]')).map((a) => {
  const rec = recordOf(a);
  rec.href = a.getAttribute('href') || '';
  return rec;
});
"""

LANDMARKS_SCRIPT = _HELPERS + r"""
return Array.from(document.querySelectorAll(LANDMARK_QUERY)).map(recordOf);
"""

FORMS_SCRIPT = _HELPERS + r"""
const controlOf = (el) => {
  const rec = recordOf(el);
  const id = el.getAttribute('id');
  rec.hasLabelFor = !!(id && document.querySelector('label[for="' + CSS.escape(id) + '"]'));
  rec.inFieldset = !!el.closest('fieldset');
  return rec;
};
return {
  controls: Array.from(document.querySelectorAll('input, select, textarea')).map(controlOf),
  forms: Array.from(document.querySelectorAll('form')).map((form) => ({
    selector: selectorFor(form),
    inputs: Array.from(form.querySelectorAll('input, select, textarea')).map(recordOf),
    hasSubmit: !!form.querySelector('input[type="submit"], button[type="submit"], button:not([type])'),
    hasValidation: !!form.querySelector('[required], [pattern], [min], [max]'),
  })),
};
"""

INTERACTIVE_SCRIPT = _HELPERS + r"""
const query = 'button, a[href], input, select, textarea, [tabindex], [onclick], [role="button"], [role="link"]';
return Array.from(document.querySelectorAll(query)).map(recordOf);
"""

COLORS_SCRIPT = _HELPERS + r"""
const samples = [];
document.querySelectorAll('p, span, div, h1, h2, h3, h4, h5, h6, a, button, label').forEach((el) => {
  const text = (el.textContent || '').trim();
  if (!text) return;
  const styles = window.getComputedStyle(el);
  samples.push({
    selector: selectorFor(el),
    text: text,
    color: styles.color,
    backgroundColor: styles.backgroundColor,
    fontSize: styles.fontSize,
    fontWeight: styles.fontWeight,
  });
});
return samples;
"""

STRUCTURE_SCRIPT = _HELPERS + r"""
return {
  headingLevels: Array.from(document.querySelectorAll('h1, h2, h3, h4, h5, h6'))
    .map(h => parseInt(h.tagName.charAt(1), 10)),
  landmarkCount: document.querySelectorAll(LANDMARK_QUERY).length,
  skipLinkCount: document.querySelectorAll('a[href^="#"]').length,
};
"""

ACCESSIBILITY_TREE_SCRIPT = _HELPERS + r"""
const query = 'h1, h2, h3, h4, h5, h6, button, a, input, select, textarea, [role]';
return Array.from(document.querySelectorAll(query)).map((el) => ({
  name: el.getAttribute('aria-label') || (el.textContent || '').trim() || null,
  role: el.getAttribute('role'),
  selector: selectorFor(el),
  id: el.id || null,
  tagName: el.tagName,
  className: typeof el.className === 'string' ? (el.className || null) : null,
}));
"""

LANGUAGE_SCRIPT = _HELPERS + r"""
return Array.from(document.querySelectorAll('[lang]')).map((el) => ({
  selector: selectorFor(el),
  lang: el.getAttribute('lang') || '',
}));
"""

MEDIA_SCRIPT = _HELPERS + r"""
return Array.from(document.querySelectorAll('video, audio')).map((el) => ({
  selector: selectorFor(el),
  type: el.tagName.toLowerCase(),
  controls: el.hasAttribute('controls'),
  autoplay: el.hasAttribute('autoplay'),
  trackKinds: Array.from(el.querySelectorAll('track')).map(t => (t.getAttribute('kind') || 'subtitles').toLowerCase()),
}));
"""

NAVIGATION_STATUS_SCRIPT = r"""
const entries = performance.getEntriesByType('navigation');
if (!entries.length || typeof entries[0].responseStatus !== 'number') return 0;
return entries[0].responseStatus;
"""

NETWORK_IDLE_SCRIPT = r"""
// the default 250-entry resource buffer stops recording on heavy pages
if (performance.setResourceTimingBufferSize) performance.setResourceTimingBufferSize(5000);
if (document.readyState !== 'complete') return false;
const quietMs = arguments[0];
const now = performance.now();
const entries = performance.getEntriesByType('resource') || [];
return entries.every(e => (now - (e.responseEnd || e.startTime)) > quietMs);
"""
