# tests/conftest.py
"""
Shared fixtures: a small GCC-XML corpus describing

    namespace geo {
        class Shape { public: virtual double area() const = 0; private: int id_; };
        class Circle : public Shape {
        public: Circle(double r); double area() const;
        protected: double radius_;
        };
        struct Point { double x; };
        double distance(const Point& a, const Point& b);
        typedef double Real;
        typedef Real Scalar;
        enum Color { red, green };
        Point origin;
    }
    extern "C" int printf(const char* fmt, ...);
    int counter;          // its File record is missing
    int table[10];
"""

import io

import pytest

from cxxquery import cache as cache_module
from cxxquery.cache import NodeCache
from cxxquery.records import read_xml

GEO_XML = b"""<?xml version="1.0"?>
<GCC_XML cvs_revision="1.135">
  <Namespace id="_1" name="::" members="_3 _18 _19 _30"/>
  <Namespace id="_3" name="geo" context="_1"/>
  <Class id="_4" name="Shape" context="_3" file="f1" line="3" abstract="1"/>
  <Method id="_5" name="area" returns="_20" context="_4" access="public"
          demangled="geo::Shape::area() const" const="1" virtual="1"
          pure_virtual="1" file="f1"/>
  <Field id="_6" name="id_" type="_21" context="_4" access="private" file="f1"/>
  <Class id="_7" name="Circle" context="_3" file="f1">
    <Base type="_4" access="public" virtual="0" offset="0"/>
  </Class>
  <Constructor id="_8" name="Circle" context="_7" access="public" file="f1">
    <Argument name="r" type="_20"/>
  </Constructor>
  <Method id="_9" name="area" returns="_20" context="_7" access="public"
          demangled="geo::Circle::area() const" const="1" virtual="1" file="f1"/>
  <Field id="_10" name="radius_" type="_20" context="_7" access="protected" file="f1"/>
  <Struct id="_11" name="Point" context="_3" file="f1"/>
  <Field id="_12" name="x" type="_20" context="_11" access="public" file="f1"/>
  <Function id="_13" name="distance" returns="_20" context="_3" file="f1"
            demangled="geo::distance(geo::Point const&amp;, geo::Point const&amp;)">
    <Argument name="a" type="_24"/>
    <Argument name="b" type="_24"/>
  </Function>
  <Typedef id="_14" name="Real" type="_20" context="_3" file="f1"/>
  <Typedef id="_15" name="Scalar" type="_14" context="_3" file="f1"/>
  <Enumeration id="_16" name="Color" context="_3" file="f1">
    <EnumValue name="red" init="0"/>
    <EnumValue name="green" init="1"/>
  </Enumeration>
  <Variable id="_17" name="origin" type="_11" context="_3" file="f1"/>
  <Function id="_18" name="printf" returns="_21" context="_1" extern="1" file="f2">
    <Argument name="fmt" type="_23"/>
    <Ellipsis/>
  </Function>
  <Variable id="_19" name="counter" type="_21" context="_1" file="f9"/>
  <FundamentalType id="_20" name="double"/>
  <FundamentalType id="_21" name="int"/>
  <PointerType id="_23" type="_25"/>
  <ReferenceType id="_24" type="_27"/>
  <CvQualifiedType id="_25" type="_26" const="1"/>
  <FundamentalType id="_26" name="char"/>
  <CvQualifiedType id="_27" type="_11" const="1"/>
  <ArrayType id="_29" min="0" max="9u" type="_21"/>
  <Variable id="_30" name="table" type="_29" context="_1" file="f2"/>
  <Frobnicator id="_31" name="gizmo" context="_3"/>
  <File id="f1" name="/src/include/shapes.h"/>
  <File id="f2" name="/usr/include/stdio.h"/>
</GCC_XML>
"""

# The three-record corpus from the package documentation.
NCF_RECORDS = [
    {"kind": "Namespace", "id": "1", "name": "N", "context": "_1"},
    {"kind": "Class", "id": "2", "name": "C", "context": "1"},
    {"kind": "Function", "id": "3", "name": "f",
     "demangled": "N::C::f(int)", "context": "2"},
]


@pytest.fixture(autouse=True)
def _fresh_current_cache():
    """Every test starts without a process-wide corpus."""
    cache_module.reset()
    yield
    cache_module.reset()


@pytest.fixture
def geo_records():
    return list(read_xml(io.BytesIO(GEO_XML)))


@pytest.fixture
def geo(geo_records):
    return NodeCache().ingest(geo_records)


@pytest.fixture
def geo_ns(geo):
    return geo.root.namespaces("geo").one()


@pytest.fixture
def geo_xml_file(tmp_path):
    path = tmp_path / "geo.xml"
    path.write_bytes(GEO_XML)
    return path


@pytest.fixture
def ncf_records():
    return [dict(r) for r in NCF_RECORDS]


@pytest.fixture
def ncf():
    return NodeCache().ingest(NCF_RECORDS)
