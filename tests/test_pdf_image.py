from __future__ import annotations

import pytest
from pikepdf import Array, Dictionary, Name, String

from extractors.pdf_image import PdfImage, extract_page_images, parse_color_space_details
from models.color_space import (
    DEVICE_CMYK,
    DEVICE_GRAY,
    DEVICE_RGB,
    PATTERN,
    UNSUPPORTED,
    ColorSpace,
    IndexedColorSpaceDetails,
    SeparationColorSpaceDetails,
)
from conftest import encode_image, make_rgb_image


@pytest.mark.parametrize("name, expected", [
    ("/DeviceGray", DEVICE_GRAY),
    ("/G", DEVICE_GRAY),
    ("/DeviceRGB", DEVICE_RGB),
    ("/RGB", DEVICE_RGB),
    ("/DeviceCMYK", DEVICE_CMYK),
    ("/CMYK", DEVICE_CMYK),
    ("/Pattern", PATTERN),
    ("/Lab", UNSUPPORTED),
])
def test_device_names(name, expected):
    assert parse_color_space_details(Name(name)) == expected


def test_calibrated_spaces_map_to_device_spaces():
    assert parse_color_space_details(Array([Name.CalRGB, Dictionary()])) == DEVICE_RGB
    assert parse_color_space_details(Array([Name.CalGray, Dictionary()])) == DEVICE_GRAY


@pytest.mark.parametrize("components, expected", [(1, DEVICE_GRAY), (3, DEVICE_RGB), (4, DEVICE_CMYK), (2, UNSUPPORTED)])
def test_icc_based_uses_component_count(source_pdf, components, expected):
    profile = source_pdf.make_stream(b"")
    profile.N = components
    assert parse_color_space_details(Array([Name.ICCBased, profile])) == expected


def test_indexed_with_string_lookup():
    details = parse_color_space_details(Array([Name.Indexed, Name.DeviceRGB, 1, String(b"\xff\x00\x00\x00\xff\x00")]))

    assert isinstance(details, IndexedColorSpaceDetails)
    assert details.hi_val == 1
    assert details.base_type == ColorSpace.DEVICE_RGB
    assert details.color_table == b"\xff\x00\x00\x00\xff\x00"


def test_indexed_with_stream_lookup(source_pdf):
    lookup = source_pdf.make_stream(bytes([0, 0, 0, 255]))
    details = parse_color_space_details(Array([Name.I, Name.DeviceCMYK, 0, lookup]))
    assert details.base_type == ColorSpace.DEVICE_CMYK
    assert details.color_table == bytes([0, 0, 0, 255])


def test_indexed_over_pattern_is_unsupported():
    assert parse_color_space_details(Array([Name.Indexed, Name.Pattern, 0, String(b"\x00")])) == UNSUPPORTED


def test_truncated_indexed_array_is_unsupported():
    assert parse_color_space_details(Array([Name.Indexed, Name.DeviceRGB])) == UNSUPPORTED


def test_separation():
    details = parse_color_space_details(Array([Name.Separation, Name.Gold, Name.DeviceCMYK, Dictionary()]))
    assert isinstance(details, SeparationColorSpaceDetails)
    assert details.name == "Gold"
    assert details.alternate_color_space_details == DEVICE_CMYK


def test_named_space_from_resources(source_pdf):
    profile = source_pdf.make_stream(b"")
    profile.N = 1
    resources = Dictionary(ColorSpace=Dictionary(CS0=Array([Name.ICCBased, profile])))

    assert parse_color_space_details(Name("/CS0"), resources) == DEVICE_GRAY
    assert parse_color_space_details(Name("/CS1"), resources) == UNSUPPORTED


def image_stream(pdf, data, **entries):
    stream = pdf.make_stream(data)
    stream.Type = Name.XObject
    stream.Subtype = Name.Image
    for key, value in entries.items():
        stream[f"/{key}"] = value
    return stream


def test_image_metadata(source_pdf):
    image = PdfImage(image_stream(
        source_pdf, bytes(6), Width=2, Height=1, BitsPerComponent=8, ColorSpace=Name.DeviceRGB,
    ))
    assert (image.width_in_samples, image.height_in_samples) == (2, 1)
    assert image.bits_per_component == 8
    assert image.color_space_details == DEVICE_RGB
    assert image.try_get_bytes() == bytes(6)


def test_image_mask_is_one_bit_gray(source_pdf):
    image = PdfImage(image_stream(source_pdf, b"\x80", Width=1, Height=1, ImageMask=True))
    assert image.bits_per_component == 1
    assert image.color_space_details == DEVICE_GRAY


def test_missing_color_space(source_pdf):
    image = PdfImage(image_stream(source_pdf, b"\x00", Width=1, Height=1, BitsPerComponent=8))
    assert image.color_space_details is None


def test_dct_images_are_decoded(source_pdf):
    jpeg = encode_image(make_rgb_image(2, 2, color=(0, 255, 0)), "JPEG")
    image = PdfImage(image_stream(
        source_pdf, jpeg, Width=2, Height=2, BitsPerComponent=8,
        ColorSpace=Name.DeviceRGB, Filter=Name.DCTDecode,
    ))

    samples = image.try_get_bytes()
    assert len(samples) == 2 * 2 * 3
    assert samples[1] > 200


def test_dct_filter_chains_are_not_decoded(source_pdf):
    image = PdfImage(image_stream(
        source_pdf, b"\x00", Width=1, Height=1, BitsPerComponent=8, ColorSpace=Name.DeviceRGB,
        Filter=Array([Name.FlateDecode, Name.DCTDecode]),
    ))
    assert image.try_get_bytes() is None


def test_extract_page_images_skips_forms(source_pdf):
    image = image_stream(source_pdf, bytes(3), Width=1, Height=1, BitsPerComponent=8, ColorSpace=Name.DeviceRGB)
    form = source_pdf.make_stream(b"")
    form.Type = Name.XObject
    form.Subtype = Name.Form

    page = source_pdf.add_blank_page()
    page.obj.Resources = Dictionary(XObject=Dictionary(Im1=image, Fm1=form))

    images = extract_page_images(page)
    assert list(images) == ["Im1"]
    assert images["Im1"].color_space_details == DEVICE_RGB


def test_extract_page_without_resources(source_pdf):
    page = source_pdf.add_blank_page()
    if '/Resources' in page.obj:
        del page.obj['/Resources']
    assert extract_page_images(page) == {}


def test_self_referencing_named_space_is_unsupported():
    resources = Dictionary(ColorSpace=Dictionary(CS0=Name("/CS0")))
    assert parse_color_space_details(Name("/CS0"), resources) == UNSUPPORTED


def test_named_spaces_referring_to_each_other_are_unsupported():
    resources = Dictionary(ColorSpace=Dictionary(
        CS0=Array([Name.Indexed, Name("/CS1"), 0, String(b"\x00")]),
        CS1=Name("/CS0"),
    ))
    assert parse_color_space_details(Name("/CS0"), resources) == UNSUPPORTED


def test_nested_named_spaces_resolve():
    resources = Dictionary(ColorSpace=Dictionary(
        Spot=Array([Name.Separation, Name.Gold, Name("/Base"), Dictionary()]),
        Base=Name.DeviceCMYK,
    ))
    details = parse_color_space_details(Array([Name.Indexed, Name("/Spot"), 0, String(b"\x00")]), resources)
    assert details.base_type == ColorSpace.SEPARATION


def test_indirect_array_containing_itself_is_unsupported(source_pdf):
    looped = source_pdf.make_indirect(Array())
    looped.append(looped)
    assert parse_color_space_details(looped) == UNSUPPORTED


def test_extract_page_images_skips_unreadable_dictionaries(source_pdf):
    good = image_stream(source_pdf, bytes(3), Width=1, Height=1, BitsPerComponent=8, ColorSpace=Name.DeviceRGB)
    bad_width = image_stream(source_pdf, bytes(3), Width=Name("/Oops"), Height=1, BitsPerComponent=8)
    bad_depth = image_stream(source_pdf, bytes(3), Width=1, Height=1, BitsPerComponent=String(b"eight"))

    page = source_pdf.add_blank_page()
    page.obj.Resources = Dictionary(XObject=Dictionary(Im1=good, Im2=bad_width, Im3=bad_depth))

    assert list(extract_page_images(page)) == ["Im1"]
