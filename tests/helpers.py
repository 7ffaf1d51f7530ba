"""Test data shared by the test modules."""

MANIFEST = """<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android"
    package="org.example.hello">
    <application android:label="Hello">
        <activity android:name="HelloWorld" android:label="Hello">
        </activity>
    </application>
</manifest>
"""

BUILD_TEMPLATE = '<project name="PROJECT_NAME" default="help">\n</project>\n'

LIBRARY_MANIFEST = """<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android"
    package="org.apache.cordova">
</manifest>
"""
